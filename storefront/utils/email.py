import smtplib
from email.mime.text import MIMEText
from email.utils import formataddr

from markupsafe import escape

from storefront.errors import NotificationFailure


def build_trade_enquiry_email(submission, templates, api_config):
    """Subject and HTML body; every submitted value is escaped."""
    if submission.product_interest:
        products = api_config.list_separator.join(str(escape(p)) for p in submission.product_interest)
    else:
        products = templates.none_text

    role = escape(submission.role) if submission.role else templates.na_text
    quantity = escape(submission.quantity) if submission.quantity else templates.na_text

    # header value: no line breaks
    subject = ' '.join(f'{templates.trade_subject} {submission.company}'.split())
    lines = [
        f'<h2>{templates.new_trade_enquiry_title}</h2>',
        f'<p><strong>{templates.name_label}:</strong> {escape(submission.name)}</p>',
        f'<p><strong>{templates.company_label}:</strong> {escape(submission.company)}</p>',
        f'<p><strong>{templates.email_label}:</strong> {escape(submission.email)}</p>',
        f'<p><strong>{templates.phone_label}:</strong> {escape(submission.phone)}</p>',
        f'<p><strong>{templates.role_label}:</strong> {role}</p>',
        f'<p><strong>{templates.country_label}:</strong> {escape(submission.country)}</p>',
        f'<p><strong>{templates.products_label}:</strong> {products}</p>',
        f'<p><strong>{templates.quantity_label}:</strong> {quantity}</p>',
        f'<p><strong>{templates.message_label}:</strong></p>',
        f'<p>{escape(submission.message)}</p>',
    ]
    return subject, '\n'.join(lines)


class SmtpNotifier:
    """Sends trade enquiry notifications through the configured SMTP relay."""

    def __init__(self, config):
        self.config = config

    def recipient(self, api_config):
        return self.config.get('CONTACT_EMAIL') or api_config.fallback_email

    def send(self, submission, settings):
        host = self.config.get('EMAIL_HOST')
        port = self.config.get('EMAIL_PORT', 587)
        username = self.config.get('EMAIL_USERNAME')
        password = self.config.get('EMAIL_PASSWORD')
        use_tls = self.config.get('EMAIL_USE_TLS', True)
        templates = settings.email_templates
        from_email = self.config.get('EMAIL_FROM') or templates.from_email
        to_email = self.recipient(settings.api_config)

        if not host:
            raise NotificationFailure('Email not sent - missing SMTP configuration')

        subject, body = build_trade_enquiry_email(submission, templates, settings.api_config)
        msg = MIMEText(body, 'html')
        msg['Subject'] = subject
        msg['From'] = formataddr((templates.from_name, from_email))
        msg['To'] = to_email
        msg['Reply-To'] = submission.email

        try:
            server = smtplib.SMTP(host, port, timeout=10)
            try:
                if use_tls: server.starttls()
                if username and password: server.login(username, password)
                server.sendmail(from_email, [to_email], msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationFailure(f'Failed to send email: {e}') from e
