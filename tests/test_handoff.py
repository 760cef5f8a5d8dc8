import json
import logging

from storefront.enquiry.handoff import DEFAULT_HANDOFF_KEY, HandoffSlot
from storefront.enquiry.storage import MemoryStorage
from storefront.models.enquiry import EnquiryItem


def _items():
    return [
        EnquiryItem(id='1-a', product_id='p1', product_title='Almonds', quantity='5 MT', grade='NPIS'),
        EnquiryItem(id='2-b', product_id='p2', product_title='Raisins'),
    ]


def test_write_keeps_titles_and_quantities_only():
    storage = MemoryStorage()
    HandoffSlot(storage).write(_items())

    assert json.loads(storage.get_item(DEFAULT_HANDOFF_KEY)) == [
        {'productTitle': 'Almonds', 'quantity': '5 MT'},
        {'productTitle': 'Raisins'},
    ]


def test_take_is_single_use():
    slot = HandoffSlot(MemoryStorage())
    slot.write(_items())

    first = slot.take()
    second = slot.take()

    assert [item.product_title for item in first] == ['Almonds', 'Raisins']
    assert first[0].quantity == '5 MT'
    assert second == []


def test_take_on_empty_slot():
    assert HandoffSlot(MemoryStorage()).take() == []


def test_malformed_payload_is_dropped(caplog):
    storage = MemoryStorage({DEFAULT_HANDOFF_KEY: '[{"quantity": "1 MT"}]'})
    slot = HandoffSlot(storage)

    with caplog.at_level(logging.ERROR, logger='storefront.enquiry.handoff'):
        assert slot.take() == []

    assert storage.get_item(DEFAULT_HANDOFF_KEY) is None
    assert 'Dropped malformed enquiry handoff' in caplog.text


def test_unparseable_payload_is_dropped():
    storage = MemoryStorage({DEFAULT_HANDOFF_KEY: 'not json'})
    assert HandoffSlot(storage).take() == []
    assert storage.get_item(DEFAULT_HANDOFF_KEY) is None
