from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter


class EnquiryItemFields(BaseModel):
    """Buyer-editable refinements shared by every enquiry item shape."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    grade: str | None = None
    pack_format: str | None = Field(default=None, alias='packFormat')
    quantity: str | None = None
    moq: str | None = Field(default=None, alias='MOQ')
    notes: str | None = None


class EnquiryItemInput(EnquiryItemFields):
    product_id: str = Field(..., alias='productId')
    product_title: str = Field(..., alias='productTitle')


class EnquiryItem(EnquiryItemInput):
    model_config = ConfigDict(populate_by_name=True, extra='ignore', frozen=True)

    id: str

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class EnquiryItemUpdate(EnquiryItemFields):
    product_title: str | None = Field(default=None, alias='productTitle')

    def changes(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class UserDetails(BaseModel):
    model_config = ConfigDict(extra='ignore')

    name: str | None = None
    company: str | None = None
    email: EmailStr | None = None
    phone: str | None = None


class DocumentItem(EnquiryItemFields):
    product_title: str = Field(..., alias='productTitle', min_length=1)


class DocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    items: list[DocumentItem] | None = None
    user_details: UserDetails | None = Field(default=None, alias='userDetails')


class HandoffItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    product_title: str = Field(..., alias='productTitle')
    quantity: str | None = None


EnquiryList = TypeAdapter(list[EnquiryItem])
HandoffList = TypeAdapter(list[HandoffItem])
