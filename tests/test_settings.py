import json
import logging

from storefront.settings import get_site_settings, load_cms_settings, resolve_site_settings


def test_defaults():
    settings = resolve_site_settings()

    assert settings.api_config.rate_limit_max_requests == 5
    assert settings.api_config.rate_limit_window_ms == 60000
    assert settings.api_config.unknown_ip_label == 'unknown'
    assert settings.validation.phone_min_length == 10
    assert settings.validation.honeypot_max_length == 0
    assert settings.api_messages.enquiry_success == \
        'Thank you for your trade enquiry. We will get back to you soon.'


def test_cms_values_merge_over_defaults():
    settings = resolve_site_settings({
        'apiConfig': {'rateLimitMaxRequests': 3},
        'apiMessages': {'enquirySuccess': 'Merci !'},
    })

    assert settings.api_config.rate_limit_max_requests == 3
    assert settings.api_config.rate_limit_window_ms == 60000
    assert settings.api_messages.enquiry_success == 'Merci !'
    assert settings.api_messages.rate_limit_error == 'Too many requests. Please try again later.'


def test_snake_case_sections_are_accepted():
    settings = resolve_site_settings({'form_labels': {'unknown_product': 'Produit'}})
    assert settings.form_labels.unknown_product == 'Produit'


def test_nested_pdf_template_values():
    settings = resolve_site_settings({
        'pdfTemplate': {'footerText1': 'Thanks', 'tableHeaders': {'moq': 'Min. Order'}},
    })

    template = settings.pdf_template
    assert template.footer_text1 == 'Thanks'
    assert template.table_headers.moq == 'Min. Order'
    assert template.table_headers.product == 'Product'


def test_invalid_section_falls_back_alone(caplog):
    with caplog.at_level(logging.WARNING, logger='storefront.settings'):
        settings = resolve_site_settings({
            'apiConfig': {'rateLimitMaxRequests': 'lots', 'listSeparator': ' | '},
            'validation': {'nameMinLength': 4},
        })

    assert settings.api_config.rate_limit_max_requests == 5
    assert settings.api_config.list_separator == ', '
    assert settings.validation.name_min_length == 4
    assert 'api_config invalid' in caplog.text


def test_non_mapping_document_is_ignored(caplog):
    with caplog.at_level(logging.WARNING, logger='storefront.settings'):
        settings = resolve_site_settings(['not', 'settings'])

    assert settings.api_config.rate_limit_max_requests == 5
    assert 'expected a mapping' in caplog.text


def test_overrides_win_over_cms():
    settings = resolve_site_settings(
        {'apiConfig': {'rateLimitMaxRequests': 3, 'rateLimitWindowMs': 1000}},
        {'rate_limit_max_requests': 10, 'rate_limit_window_ms': None},
    )

    assert settings.api_config.rate_limit_max_requests == 10
    assert settings.api_config.rate_limit_window_ms == 1000


def test_inline_settings_take_precedence(app, tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({'apiConfig': {'rateLimitMaxRequests': 9}}), encoding='utf-8')
    app.config['SITE_SETTINGS_FILE'] = str(path)
    app.config['SITE_SETTINGS'] = {'apiConfig': {'rateLimitMaxRequests': 2}}

    assert load_cms_settings(app) == {'apiConfig': {'rateLimitMaxRequests': 2}}


def test_settings_file_is_loaded(app, tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({'apiConfig': {'rateLimitMaxRequests': 9}}), encoding='utf-8')
    app.config['SITE_SETTINGS_FILE'] = str(path)

    with app.test_request_context('/'):
        assert get_site_settings().api_config.rate_limit_max_requests == 9


def test_broken_settings_file_is_logged(app, tmp_path, caplog):
    path = tmp_path / 'settings.json'
    path.write_text('{broken', encoding='utf-8')
    app.config['SITE_SETTINGS_FILE'] = str(path)

    with caplog.at_level(logging.ERROR):
        assert load_cms_settings(app) is None

    assert 'Failed to load site settings' in caplog.text


def test_missing_settings_file(app, tmp_path):
    app.config['SITE_SETTINGS_FILE'] = str(tmp_path / 'absent.json')
    assert load_cms_settings(app) is None


def test_config_overrides_apply_per_request(app):
    app.config['SITE_SETTINGS'] = {'apiConfig': {'rateLimitMaxRequests': 3}}
    app.config['RATE_LIMIT_MAX_REQUESTS'] = 20

    with app.test_request_context('/'):
        assert get_site_settings().api_config.rate_limit_max_requests == 20
