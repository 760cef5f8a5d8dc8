"""Trade enquiry intake.

Rate limit -> validate -> honeypot -> persist -> notify -> respond.
Once a submission has passed validation the caller is always told it was
accepted: storing the record and sending the notification are attempted
independently of each other and their failures are only logged.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from storefront.errors import EnquiryValidationError, RateLimitExceeded, SpamDetected
from storefront.models.validation import create_trade_enquiry_schema

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    ACCEPTED = 'accepted'
    FAKE_ACCEPTED = 'fake_accepted'
    RATE_LIMITED = 'rate_limited'
    REJECTED = 'rejected'
    SERVER_ERROR = 'server_error'


@dataclass
class SubmissionOutcome:
    state: SubmissionState
    status_code: int
    message: str
    validation_issues: list | None = None
    persisted: bool = False
    notified: bool = False

    @property
    def accepted(self) -> bool:
        return self.state in (SubmissionState.ACCEPTED, SubmissionState.FAKE_ACCEPTED)

    def to_response(self) -> dict:
        if self.accepted:
            return {'success': True, 'message': self.message}
        body = {'success': False, 'error': self.message}
        if self.validation_issues is not None:
            body['details'] = self.validation_issues
        return body


def build_record(submission, api_config, metadata=None) -> dict:
    record = {
        'type': api_config.enquiry_type_trade,
        'status': api_config.enquiry_status_new,
        'name': submission.name,
        'email': submission.email,
        'phone': submission.phone,
        'company': submission.company,
        'role': submission.role or None,
        'country': submission.country,
        'product_interest': list(submission.product_interest or []),
        'quantity': submission.quantity or None,
        'message': submission.message,
    }
    record.update(metadata or {})
    return record


class TradeEnquiryPipeline:
    def __init__(self, rate_limiter, repository, notifier):
        self.rate_limiter = rate_limiter
        self.repository = repository
        self.notifier = notifier

    def submit(self, payload, identity, settings, metadata=None) -> SubmissionOutcome:
        messages = settings.api_messages
        try:
            self._check_rate_limit(identity, settings.api_config)
            schema = create_trade_enquiry_schema(settings.validation)
            result = schema.validate(payload)
            if not result.valid:
                raise EnquiryValidationError(result.issues)
            submission = result.data
            if schema.is_spam(submission):
                raise SpamDetected()

            record = build_record(submission, settings.api_config, metadata)
            persisted = self._persist(record)
            notified = self._notify(submission, settings)
        except RateLimitExceeded:
            logger.warning(f'Trade enquiry rate limited: {identity}')
            return SubmissionOutcome(SubmissionState.RATE_LIMITED, 429, messages.rate_limit_error)
        except EnquiryValidationError as e:
            logger.info(f'Trade enquiry rejected: {len(e.issues)} issue(s)')
            return SubmissionOutcome(SubmissionState.REJECTED, 400, messages.validation_error,
                                     validation_issues=e.issues)
        except SpamDetected:
            logger.info(f'Trade enquiry honeypot tripped: {identity}')
            return SubmissionOutcome(SubmissionState.FAKE_ACCEPTED, 200, messages.enquiry_success)
        except Exception:
            logger.exception('Trade enquiry unhandled error')
            return SubmissionOutcome(SubmissionState.SERVER_ERROR, 500, messages.server_error)

        return SubmissionOutcome(SubmissionState.ACCEPTED, 200, messages.enquiry_success,
                                 persisted=persisted, notified=notified)

    def _check_rate_limit(self, identity, api_config):
        allowed = self.rate_limiter.allow(
            identity, api_config.rate_limit_max_requests, api_config.rate_limit_window_ms)
        if not allowed:
            raise RateLimitExceeded(identity)

    def _persist(self, record) -> bool:
        try:
            self.repository.save(record)
        except Exception as e:
            logger.error(f'Trade enquiry not stored: {e}', exc_info=True)
            return False
        return True

    def _notify(self, submission, settings) -> bool:
        try:
            self.notifier.send(submission, settings)
        except Exception as e:
            logger.error(f'Trade enquiry notification failed: {e}', exc_info=True)
            return False
        return True
