"""Enquiry UI surfaces.

None of these hold the cart. Each re-reads the store when
``enquiry_updated`` fires and only re-renders when the snapshot object
actually changed.
"""
import time
from collections.abc import Mapping

from storefront.enquiry.pdf import render_enquiry_pdf
from storefront.errors import EmptyEnquiry
from storefront.settings import FormLabels


def resolve_product_title(title, language, labels: FormLabels | None = None) -> str:
    """Pick the display title for ``language`` from a plain or localized title."""
    labels = labels or FormLabels()
    if isinstance(title, str) and title:
        return title
    if isinstance(title, Mapping):
        for key in (language, labels.default_language):
            value = title.get(key)
            if isinstance(value, str) and value:
                return value
        for value in title.values():
            if isinstance(value, str) and value:
                return value
    return labels.unknown_product


class Surface:
    def __init__(self, store, signals):
        self.store = store
        self.signals = signals
        self.render_count = 0
        self._snapshot = None
        self._unsubscribers = []
        self._listen(signals.enquiry_updated, self.sync)
        self.sync()

    def _listen(self, signal, callback):
        self._unsubscribers.append(signal.subscribe(callback))

    def sync(self, **_):
        snapshot = self.store.read()
        if snapshot is not self._snapshot:
            self._snapshot = snapshot
            self.render_count += 1

    @property
    def items(self):
        return self._snapshot

    def unmount(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []


class FloatingEnquiryBar(Surface):
    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def visible(self) -> bool:
        return self.item_count > 0

    def open_panel(self):
        self.signals.open_enquiry_panel.publish(source='floating_bar')

    def to_dict(self):
        return {'count': self.item_count, 'visible': self.visible}


class EnquiryPanel(Surface):
    def __init__(self, store, signals):
        self.is_open = False
        super().__init__(store, signals)
        self._listen(signals.open_enquiry_panel, self.open)

    def open(self, **_):
        self.is_open = True

    def close(self):
        self.is_open = False

    def update_item(self, item_id, changes):
        items = self.store.update(item_id, changes)
        self.signals.enquiry_updated.publish()
        return items

    def remove_item(self, item_id):
        items = self.store.remove(item_id)
        self.signals.enquiry_updated.publish()
        return items

    def clear(self):
        self.store.clear()
        self.signals.enquiry_updated.publish()

    def export_pdf(self, user_details=None, template=None):
        if not self.items:
            raise EmptyEnquiry('Nothing to export')
        return render_enquiry_pdf(self.items, user_details=user_details, template=template)

    def to_dict(self):
        return {
            'open': self.is_open,
            'items': [item.to_storage() for item in self.items],
        }


class EnquiryBuilder:
    """Adds products to the cart and hands the cart over to the trade form."""

    def __init__(self, store, signals, handoff, language='en', labels: FormLabels | None = None,
                 trade_form_url='/contact?type=trade'):
        self.store = store
        self.signals = signals
        self.handoff = handoff
        self.language = language
        self.labels = labels or FormLabels()
        self.trade_form_url = trade_form_url
        self.panel = EnquiryPanel(store, signals)
        self._unsubscribe = signals.add_to_enquiry.subscribe(self.handle_add)

    def handle_add(self, product=None, **_):
        product = product or {}
        product_id = product.get('_id') or product.get('id') or f'unknown-{int(time.time() * 1000)}'
        items = self.store.add({
            'productId': product_id,
            'productTitle': resolve_product_title(product.get('title'), self.language, self.labels),
            'MOQ': product.get('MOQ') or None,
        })
        self.signals.enquiry_updated.publish()
        return items

    def submit_to_trade_form(self) -> str:
        items = self.store.read()
        if not items:
            raise EmptyEnquiry('Enquiry list is empty')
        self.handoff.write(items)
        self.panel.close()
        return self.trade_form_url

    def unmount(self):
        self._unsubscribe()
        self.panel.unmount()


class TradeEnquiryForm:
    """Trade form pre-fill: product interest and a message listing the cart."""

    def __init__(self, store, signals, handoff, labels: FormLabels | None = None):
        self.store = store
        self.signals = signals
        self.handoff = handoff
        self.labels = labels or FormLabels()
        self.product_interest = []
        self.message = ''
        self._unsubscribe = None

    def mount(self):
        pending = self.handoff.take()
        if pending:
            self.populate(pending)
        self._unsubscribe = self.signals.populate_enquiry_form.subscribe(self.populate_from_store)
        return self

    def populate_from_store(self, **_):
        items = self.store.read()
        if items:
            self.populate(items)

    def populate(self, items):
        self.product_interest = [item.product_title for item in items]
        lines = [
            f'- {item.product_title} ({item.quantity})' if item.quantity else f'- {item.product_title}'
            for item in items
        ]
        self.message = '\n'.join([self.labels.enquiry_list_intro, *lines])

    def unmount(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def to_dict(self):
        return {'productInterest': self.product_interest, 'message': self.message}
