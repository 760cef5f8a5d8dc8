from dataclasses import dataclass

from flask import current_app, g, request

from storefront.enquiry.handoff import HandoffSlot
from storefront.enquiry.panels import EnquiryBuilder, FloatingEnquiryBar, TradeEnquiryForm
from storefront.enquiry.signals import EnquirySignals
from storefront.enquiry.storage import SessionStorage
from storefront.enquiry.store import EnquiryStore


@dataclass
class EnquiryContext:
    """Everything the enquiry surfaces of one visitor request share."""

    store: EnquiryStore
    signals: EnquirySignals
    handoff: HandoffSlot

    def floating_bar(self):
        return FloatingEnquiryBar(self.store, self.signals)

    def builder(self, language, labels, trade_form_url):
        return EnquiryBuilder(self.store, self.signals, self.handoff, language=language,
                              labels=labels, trade_form_url=trade_form_url)

    def trade_form(self, labels):
        return TradeEnquiryForm(self.store, self.signals, self.handoff, labels=labels)


def get_enquiry_context() -> EnquiryContext:
    if 'enquiry' not in g:
        storage = SessionStorage()
        g.enquiry = EnquiryContext(
            store=EnquiryStore(storage, key=current_app.config['ENQUIRY_STORAGE_KEY']),
            signals=EnquirySignals(),
            handoff=HandoffSlot(storage, key=current_app.config['ENQUIRY_HANDOFF_KEY']),
        )
    return g.enquiry


def visitor_language(default='en'):
    lang = request.args.get('lang')
    if lang:
        return lang
    best = request.accept_languages.best
    return best.split('-')[0].lower() if best else default
