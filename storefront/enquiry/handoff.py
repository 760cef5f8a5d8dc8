"""Single-use slot carrying the cart across navigation to the trade form."""
import json
import logging

from pydantic import ValidationError

from storefront.models.enquiry import HandoffItem, HandoffList

logger = logging.getLogger(__name__)

DEFAULT_HANDOFF_KEY = 'pendingEnquiryPopulation'


class HandoffSlot:
    def __init__(self, storage, key=DEFAULT_HANDOFF_KEY):
        self.storage = storage
        self.key = key

    def write(self, items) -> None:
        payload = [
            HandoffItem(product_title=item.product_title, quantity=item.quantity)
            .model_dump(by_alias=True, exclude_none=True)
            for item in items
        ]
        self.storage.set_item(self.key, json.dumps(payload))

    def take(self) -> list[HandoffItem]:
        """Return the pending payload and delete it; later calls get ``[]``."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        self.storage.remove_item(self.key)
        try:
            return HandoffList.validate_json(raw)
        except ValidationError as e:
            logger.error('Dropped malformed enquiry handoff: %s', e.errors(include_input=False))
            return []
