"""The visitor's enquiry cart.

Snapshots are tuples and are memoised against the raw persisted string:
as long as storage holds the same value, ``read()`` hands back the very
same object, so change-detecting consumers only see a new snapshot after
a real mutation.
"""
import json
import logging
import secrets
import string
import time
from collections.abc import Mapping

from pydantic import ValidationError

from storefront.models.enquiry import EnquiryItemInput, EnquiryItemUpdate, EnquiryList

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = 'divyansh_enquiry'

# shared snapshot for empty carts and for contexts without storage
EMPTY_ITEMS = ()

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_item_id(clock=time.time):
    suffix = ''.join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f'{int(clock() * 1000)}-{suffix}'


class EnquiryStore:
    def __init__(self, storage, key=DEFAULT_STORAGE_KEY, id_factory=generate_item_id):
        self.storage = storage
        self.key = key
        self._id_factory = id_factory
        self._cached_raw = None
        self._cached_items = EMPTY_ITEMS
        # errors of the last refused add/update/remove, None when it was applied
        self.last_rejection = None

    def read(self):
        if not self.storage.available:
            return EMPTY_ITEMS

        raw = self.storage.get_item(self.key)
        if raw == self._cached_raw:
            return self._cached_items

        self._cached_raw = raw
        self._cached_items = self._parse(raw)
        return self._cached_items

    def count(self) -> int:
        return len(self.read())

    def add(self, item):
        self.last_rejection = None
        if not self.storage.available:
            return EMPTY_ITEMS

        fields = self._input_fields(item, EnquiryItemInput)
        if fields is None:
            return self.read()

        items = self.read()
        taken = {existing.id for existing in items}
        item_id = self._id_factory()
        while item_id in taken:
            item_id = self._id_factory()

        candidate = [existing.to_storage() for existing in items]
        candidate.append({**fields, 'id': item_id})
        self._save(candidate)
        return self.read()

    def update(self, item_id, changes):
        self.last_rejection = None
        if not self.storage.available:
            return EMPTY_ITEMS

        items = self.read()
        if not any(existing.id == item_id for existing in items):
            return items

        fields = self._input_fields(changes, EnquiryItemUpdate, partial=True)
        if fields is None:
            return items

        candidate = [
            {**existing.to_storage(), **fields} if existing.id == item_id else existing.to_storage()
            for existing in items
        ]
        self._save(candidate)
        return self.read()

    def remove(self, item_id):
        self.last_rejection = None
        if not self.storage.available:
            return EMPTY_ITEMS

        items = self.read()
        remaining = [existing.to_storage() for existing in items if existing.id != item_id]
        if len(remaining) == len(items):
            return items

        self._save(remaining)
        return self.read()

    def clear(self) -> None:
        if not self.storage.available:
            return
        self.storage.remove_item(self.key)

    def _parse(self, raw):
        if raw is None:
            return EMPTY_ITEMS
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning('Discarding unreadable enquiry storage: %s', e)
            return EMPTY_ITEMS
        try:
            items = EnquiryList.validate_python(parsed)
        except ValidationError as e:
            logger.warning('Discarding invalid enquiry storage: %s', e.errors(include_input=False))
            return EMPTY_ITEMS
        return tuple(items) if items else EMPTY_ITEMS

    def _save(self, candidate) -> bool:
        try:
            items = EnquiryList.validate_python(candidate)
        except ValidationError as e:
            self.last_rejection = e.errors(include_input=False)
            logger.error('Refusing to save invalid enquiry items: %s', self.last_rejection)
            return False
        self.storage.set_item(self.key, json.dumps([item.to_storage() for item in items]))
        return True

    def _input_fields(self, data, model, partial=False):
        if isinstance(data, model):
            parsed = data
        elif isinstance(data, Mapping):
            try:
                parsed = model.model_validate(data)
            except ValidationError as e:
                self.last_rejection = e.errors(include_input=False)
                logger.error('Rejected enquiry item fields: %s', self.last_rejection)
                return None
        else:
            self.last_rejection = [{'loc': (), 'type': 'invalid_type', 'msg': 'Expected an object'}]
            logger.error('Rejected enquiry item fields of type %s', type(data).__name__)
            return None
        if partial:
            return parsed.changes()
        return parsed.model_dump(by_alias=True, exclude_none=True)
