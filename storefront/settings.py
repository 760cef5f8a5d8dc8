"""CMS-editable site settings merged over hardcoded defaults.

The CMS document uses camelCase keys (``rateLimitMaxRequests``); every
section is validated on its own, so one malformed section only costs that
section its overrides.
"""
import json
import logging
from collections.abc import Mapping

from flask import current_app
from pydantic import BaseModel, ConfigDict, EmailStr, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class _Section(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class ApiMessages(_Section):
    rate_limit_error: str = 'Too many requests. Please try again later.'
    validation_error: str = 'Please check your input and try again.'
    enquiry_success: str = 'Thank you for your trade enquiry. We will get back to you soon.'
    server_error: str = 'An unexpected error occurred. Please try again later.'
    pdf_generation_error: str = 'Failed to generate PDF. Please try again.'
    empty_enquiry_error: str = 'Your enquiry list is empty.'
    item_not_found_error: str = 'Enquiry item not found.'


class EmailTemplates(_Section):
    from_name: str = 'Divyansh International'
    from_email: EmailStr = 'onboarding@resend.dev'
    trade_subject: str = 'New Trade Enquiry from'
    new_trade_enquiry_title: str = 'New Trade Enquiry'
    name_label: str = 'Name'
    company_label: str = 'Company'
    email_label: str = 'Email'
    phone_label: str = 'Phone'
    role_label: str = 'Role'
    country_label: str = 'Country'
    products_label: str = 'Products of Interest'
    quantity_label: str = 'Quantity'
    message_label: str = 'Message'
    na_text: str = 'N/A'
    none_text: str = 'None specified'


class ApiConfig(_Section):
    unknown_ip_label: str = 'unknown'
    rate_limit_max_requests: int = 5
    rate_limit_window_ms: int = 60000
    enquiry_type_trade: str = 'trade'
    enquiry_status_new: str = 'new'
    fallback_email: EmailStr = 'trade@divyanshinternational.com'
    list_separator: str = ', '


class ValidationConfig(_Section):
    name_min_length: int = 2
    name_min_error: str = 'Name must be at least 2 characters'
    email_invalid_error: str = 'Please enter a valid email address'
    message_min_length: int = 10
    message_min_error: str = 'Message must be at least 10 characters'
    company_min_length: int = 2
    company_required_error: str = 'Company name is required'
    phone_min_length: int = 10
    phone_required_error: str = 'Phone number is required'
    country_min_length: int = 2
    country_required_error: str = 'Country is required'
    honeypot_max_length: int = 0


class PdfTableHeaders(_Section):
    product: str = 'Product'
    grade: str = 'Grade'
    pack_format: str = 'Pack Format'
    quantity: str = 'Quantity'
    moq: str = 'MOQ'
    notes: str = 'Notes'


class PdfColors(_Section):
    deep_brown: str = '91, 73, 51'
    gray: str = '128, 128, 128'
    black: str = '0, 0, 0'
    dark_gray: str = '80, 80, 80'
    gold: str = '201, 164, 97'
    white: str = '255, 255, 255'
    light_gray: str = '180, 180, 180'


class PdfTemplate(_Section):
    company_name: str = 'Divyansh International'
    title: str = 'Enquiry Form'
    date_label: str = 'Date:'
    reference_label: str = 'Reference:'
    reference_prefix: str = 'ENQ-'
    contact_details_label: str = 'Contact Details:'
    name_label: str = 'Name:'
    company_label: str = 'Company:'
    email_label: str = 'Email:'
    phone_label: str = 'Phone:'
    na_text: str = 'N/A'
    empty_field_text: str = '-'
    index_label: str = '#'
    footer_text1: str = 'Thank you for your enquiry.'
    footer_text2: str = 'We will get back to you shortly.'
    filename_prefix: str = 'enquiry-'
    header_font_size: int = 18
    subtitle_font_size: int = 12
    body_font_size: int = 10
    footer_font_size: int = 8
    table_font_size: int = 9
    table_headers: PdfTableHeaders = PdfTableHeaders()
    colors: PdfColors = PdfColors()


class FormLabels(_Section):
    enquiry_list_intro: str = 'Please find the following products in my enquiry:'
    unknown_product: str = 'Unknown Product'
    default_language: str = 'en'


class SiteSettings(BaseModel):
    api_messages: ApiMessages = ApiMessages()
    email_templates: EmailTemplates = EmailTemplates()
    api_config: ApiConfig = ApiConfig()
    validation: ValidationConfig = ValidationConfig()
    pdf_template: PdfTemplate = PdfTemplate()
    form_labels: FormLabels = FormLabels()


SECTIONS = {
    'api_messages': ApiMessages,
    'email_templates': EmailTemplates,
    'api_config': ApiConfig,
    'validation': ValidationConfig,
    'pdf_template': PdfTemplate,
    'form_labels': FormLabels,
}


def resolve_site_settings(cms_settings=None, overrides=None) -> SiteSettings:
    """Merge CMS settings and deployment overrides over the defaults.

    ``overrides`` maps ``api_config`` field names to values and wins over the
    CMS; ``None`` values are skipped.
    """
    if cms_settings is not None and not isinstance(cms_settings, Mapping):
        logger.warning('Site settings ignored: expected a mapping, got %s', type(cms_settings).__name__)
        cms_settings = None
    cms_settings = cms_settings or {}

    resolved = {}
    for name, model in SECTIONS.items():
        raw = cms_settings.get(to_camel(name), cms_settings.get(name))
        if raw is None:
            resolved[name] = model()
            continue
        try:
            resolved[name] = model.model_validate(raw)
        except ValidationError as e:
            logger.warning('Site settings section %s invalid, using defaults: %s', name, e.errors())
            resolved[name] = model()

    if overrides:
        present = {k: v for k, v in overrides.items() if v is not None}
        if present:
            resolved['api_config'] = resolved['api_config'].model_copy(update=present)

    return SiteSettings(**resolved)


def load_cms_settings(app):
    """Raw CMS document from app config or the JSON file it points at."""
    inline = app.config.get('SITE_SETTINGS')
    if inline is not None:
        return inline

    path = app.config.get('SITE_SETTINGS_FILE')
    if not path:
        return None
    try:
        with open(path, encoding='utf-8') as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        app.logger.error(f'Failed to load site settings from {path}: {e}')
        return None


def get_site_settings() -> SiteSettings:
    """Settings for the current request. Re-read on every call."""
    app = current_app._get_current_object()
    overrides = {
        'rate_limit_max_requests': app.config.get('RATE_LIMIT_MAX_REQUESTS'),
        'rate_limit_window_ms': app.config.get('RATE_LIMIT_WINDOW_MS'),
    }
    return resolve_site_settings(load_cms_settings(app), overrides)
