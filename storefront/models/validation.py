from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, create_model
from pydantic_core import PydanticCustomError

from storefront.settings import ValidationConfig


class _TradeEnquiryBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    role: str | None = None
    product_interest: list[str] | None = Field(default=None, alias='productInterest')
    quantity: str | None = None
    honeypot: str | None = None


def _min_length(minimum, message):
    def check(value: str) -> str:
        if len(value) < minimum:
            raise PydanticCustomError('too_short', message)
        return value
    return check


def _email(message):
    def check(value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError('invalid_email', message)
        return value
    return check


def issue_from_error(error) -> dict:
    path = list(error['loc'])
    return {
        'path': path,
        'field': str(path[0]) if path else 'body',
        'code': error['type'],
        'message': error['msg'],
    }


@dataclass
class ValidationResult:
    valid: bool
    data: Any = None
    issues: list = field(default_factory=list)


class TradeEnquirySchema:
    """Trade enquiry rules built from a ValidationConfig.

    ``validate`` never raises; failures come back as issues with the field
    path so the form can render them inline. The honeypot is not a validation
    rule; ``is_spam`` reports it separately.
    """

    def __init__(self, config: ValidationConfig):
        self.config = config
        self.model = create_model(
            'TradeEnquirySubmission',
            __base__=_TradeEnquiryBase,
            name=(Annotated[str, AfterValidator(_min_length(config.name_min_length, config.name_min_error))], ...),
            company=(Annotated[str, AfterValidator(_min_length(config.company_min_length, config.company_required_error))], ...),
            email=(Annotated[str, AfterValidator(_email(config.email_invalid_error))], ...),
            phone=(Annotated[str, AfterValidator(_min_length(config.phone_min_length, config.phone_required_error))], ...),
            country=(Annotated[str, AfterValidator(_min_length(config.country_min_length, config.country_required_error))], ...),
            message=(Annotated[str, AfterValidator(_min_length(config.message_min_length, config.message_min_error))], ...),
        )

    def validate(self, data) -> ValidationResult:
        if not isinstance(data, Mapping):
            return ValidationResult(valid=False, issues=[{
                'path': [],
                'field': 'body',
                'code': 'invalid_type',
                'message': 'Expected a JSON object',
            }])
        try:
            submission = self.model.model_validate(data)
        except ValidationError as e:
            return ValidationResult(valid=False, issues=[issue_from_error(err) for err in e.errors()])
        return ValidationResult(valid=True, data=submission)

    def is_spam(self, submission) -> bool:
        return len(submission.honeypot or '') > self.config.honeypot_max_length


def create_trade_enquiry_schema(config: ValidationConfig | None = None) -> TradeEnquirySchema:
    return TradeEnquirySchema(config or ValidationConfig())
