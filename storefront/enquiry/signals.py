"""In-process signals shared by the enquiry surfaces.

Subscribers re-read the store themselves; ``enquiry_updated`` carries no
data. Each ``EnquirySignals`` owns its own blinker namespace, so two
visitors (or two tests) never hear each other.
"""
from blinker import Namespace


class EnquirySignal:
    def __init__(self, signal):
        self._signal = signal

    @property
    def name(self):
        return self._signal.name

    def subscribe(self, callback):
        """Connect ``callback`` and return a function that disconnects it."""
        def receiver(sender, **payload):
            callback(**payload)

        self._signal.connect(receiver, weak=False)

        def unsubscribe():
            self._signal.disconnect(receiver)
        return unsubscribe

    def publish(self, **payload):
        # synchronous: every receiver has run when this returns
        self._signal.send(self, **payload)

    @property
    def subscriber_count(self):
        return len(self._signal.receivers)


class EnquirySignals:
    def __init__(self):
        self._namespace = Namespace()
        self.enquiry_updated = EnquirySignal(self._namespace.signal('enquiryUpdated'))
        self.populate_enquiry_form = EnquirySignal(self._namespace.signal('populateEnquiryForm'))
        self.open_enquiry_panel = EnquirySignal(self._namespace.signal('openEnquiryPanel'))
        self.add_to_enquiry = EnquirySignal(self._namespace.signal('addToEnquiry'))
