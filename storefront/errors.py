"""Error taxonomy for the enquiry pipeline."""


class EnquiryError(Exception):
    """Base class for enquiry pipeline errors."""


class EnquiryValidationError(EnquiryError):
    """User-correctable input problem, carries per-field issues."""

    def __init__(self, issues, message='Validation failed'):
        super().__init__(message)
        self.issues = list(issues)


class EmptyEnquiry(EnquiryError):
    """An action that needs cart items was asked of an empty cart."""


class RateLimitExceeded(EnquiryError):
    """Submitter exceeded the request quota for the current window."""

    def __init__(self, identity):
        super().__init__(f'Rate limit exceeded for {identity}')
        self.identity = identity


class SpamDetected(EnquiryError):
    """Honeypot tripped. Never reported to the caller as an error."""


class PersistenceFailure(EnquiryError):
    """Enquiry record could not be written."""


class NotificationFailure(EnquiryError):
    """Enquiry notification could not be delivered."""
