import smtplib
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from storefront.errors import NotificationFailure
from storefront.settings import resolve_site_settings
from storefront.utils.email import SmtpNotifier, build_trade_enquiry_email

SMTP_CONFIG = {
    'EMAIL_HOST': 'smtp.example.com',
    'EMAIL_PORT': 587,
    'EMAIL_USERNAME': 'relay',
    'EMAIL_PASSWORD': 'secret',
    'EMAIL_USE_TLS': True,
    'EMAIL_FROM': 'noreply@divyanshinternational.com',
}


def _submission(**overrides):
    fields = {
        'name': 'Asha Rao',
        'company': 'Rao Foods',
        'email': 'asha@raofoods.in',
        'phone': '+91 98765 43210',
        'country': 'India',
        'role': 'Buyer',
        'product_interest': ['Almonds', 'Walnuts'],
        'quantity': '20 MT',
        'message': 'Monthly container please.',
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture
def settings():
    return resolve_site_settings()


def test_email_body_lists_submission(settings):
    subject, body = build_trade_enquiry_email(_submission(), settings.email_templates, settings.api_config)

    assert subject == 'New Trade Enquiry from Rao Foods'
    assert '<h2>New Trade Enquiry</h2>' in body
    assert '<strong>Products of Interest:</strong> Almonds, Walnuts' in body
    assert '<strong>Quantity:</strong> 20 MT' in body


def test_submitted_values_are_escaped(settings):
    submission = _submission(name='<script>alert(1)</script>', message='a & b "quoted"',
                             product_interest=['<b>Nuts</b>'])

    _, body = build_trade_enquiry_email(submission, settings.email_templates, settings.api_config)

    assert '<script>' not in body
    assert '&lt;script&gt;alert(1)&lt;/script&gt;' in body
    assert 'a &amp; b &#34;quoted&#34;' in body
    assert '&lt;b&gt;Nuts&lt;/b&gt;' in body


def test_missing_optional_values_use_placeholders(settings):
    submission = _submission(role=None, quantity='', product_interest=[])

    _, body = build_trade_enquiry_email(submission, settings.email_templates, settings.api_config)

    assert '<strong>Role:</strong> N/A' in body
    assert '<strong>Quantity:</strong> N/A' in body
    assert '<strong>Products of Interest:</strong> None specified' in body


def test_subject_has_no_line_breaks(settings):
    subject, _ = build_trade_enquiry_email(_submission(company='Evil\r\nBcc: x@y.z'),
                                           settings.email_templates, settings.api_config)
    assert '\n' not in subject and '\r' not in subject


def test_recipient_defaults_to_fallback(settings):
    assert SmtpNotifier({}).recipient(settings.api_config) == 'trade@divyanshinternational.com'
    assert SmtpNotifier({'CONTACT_EMAIL': 'sales@divyanshinternational.com'}) \
        .recipient(settings.api_config) == 'sales@divyanshinternational.com'


def test_missing_smtp_host_fails(settings):
    with pytest.raises(NotificationFailure):
        SmtpNotifier({}).send(_submission(), settings)


def test_send_through_relay(settings):
    with patch('storefront.utils.email.smtplib.SMTP') as smtp:
        SmtpNotifier(SMTP_CONFIG).send(_submission(), settings)

    smtp.assert_called_once_with('smtp.example.com', 587, timeout=10)
    server = smtp.return_value
    server.starttls.assert_called_once_with()
    server.login.assert_called_once_with('relay', 'secret')
    from_email, to_emails, message = server.sendmail.call_args.args
    assert from_email == 'noreply@divyanshinternational.com'
    assert to_emails == ['trade@divyanshinternational.com']
    assert 'Reply-To: asha@raofoods.in' in message
    assert 'Subject: New Trade Enquiry from Rao Foods' in message
    server.quit.assert_called_once_with()


def test_relay_errors_become_notification_failures(settings):
    with patch('storefront.utils.email.smtplib.SMTP') as smtp:
        smtp.return_value.sendmail.side_effect = smtplib.SMTPRecipientsRefused({})
        with pytest.raises(NotificationFailure):
            SmtpNotifier(SMTP_CONFIG).send(_submission(), settings)

    smtp.return_value.quit.assert_called_once_with()


def test_connection_errors_become_notification_failures(settings):
    with patch('storefront.utils.email.smtplib.SMTP', side_effect=ConnectionRefusedError()):
        with pytest.raises(NotificationFailure):
            SmtpNotifier(SMTP_CONFIG).send(_submission(), settings)
