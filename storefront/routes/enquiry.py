import io

from flask import Blueprint, current_app, jsonify, request, send_file
from flask_wtf.csrf import generate_csrf
from pydantic import ValidationError

from storefront.enquiry.context import get_enquiry_context, visitor_language
from storefront.enquiry.pdf import render_enquiry_pdf
from storefront.errors import EmptyEnquiry
from storefront.models.enquiry import DocumentRequest, EnquiryItemInput, EnquiryItemUpdate
from storefront.models.validation import issue_from_error
from storefront.settings import get_site_settings

enquiry_bp = Blueprint('enquiry', __name__, url_prefix='/enquiry')


def _error(message, status, details=None):
    body = {'success': False, 'error': message}
    if details is not None:
        body['details'] = details
    return jsonify(body), status


def _issues(e):
    return [issue_from_error(err) for err in e.errors(include_input=False)]


def _rejected(store, settings):
    return _error(settings.api_messages.validation_error, 400,
                  [issue_from_error(err) for err in store.last_rejection])


def _cart_body(items):
    return {
        'count': len(items),
        'items': [item.to_storage() for item in items],
    }


def _builder(settings):
    labels = settings.form_labels
    return get_enquiry_context().builder(
        visitor_language(labels.default_language), labels, current_app.config['TRADE_FORM_URL'])


def _has_item(item_id):
    return any(item.id == item_id for item in get_enquiry_context().store.read())


@enquiry_bp.route('', methods=['GET'])
def view_enquiry():
    bar = get_enquiry_context().floating_bar()
    body = _cart_body(bar.items)
    body['visible'] = bar.visible
    bar.unmount()
    return jsonify(body)


@enquiry_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    return jsonify({'csrfToken': generate_csrf()})


@enquiry_bp.route('/items', methods=['POST'])
def add_item():
    settings = get_site_settings()
    ctx = get_enquiry_context()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error(settings.api_messages.validation_error, 400)

    if 'title' in data and 'productTitle' not in data:
        # raw product description, the builder resolves the localized title
        builder = _builder(settings)
        ctx.signals.add_to_enquiry.publish(product=data)
        builder.unmount()
    else:
        try:
            item = EnquiryItemInput.model_validate(data)
        except ValidationError as e:
            return _error(settings.api_messages.validation_error, 400, _issues(e))
        ctx.store.add(item)
        ctx.signals.enquiry_updated.publish()

    if ctx.store.last_rejection is not None:
        return _rejected(ctx.store, settings)

    items = ctx.store.read()
    body = _cart_body(items)
    body['item'] = items[-1].to_storage() if items else None
    return jsonify(body), 201


@enquiry_bp.route('/items/<item_id>', methods=['PATCH'])
def update_item(item_id):
    settings = get_site_settings()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error(settings.api_messages.validation_error, 400)
    try:
        changes = EnquiryItemUpdate.model_validate(data)
    except ValidationError as e:
        return _error(settings.api_messages.validation_error, 400, _issues(e))

    if not _has_item(item_id):
        return _error(settings.api_messages.item_not_found_error, 404)

    builder = _builder(settings)
    items = builder.panel.update_item(item_id, changes)
    builder.unmount()
    store = get_enquiry_context().store
    if store.last_rejection is not None:
        return _rejected(store, settings)
    return jsonify(_cart_body(items))


@enquiry_bp.route('/items/<item_id>', methods=['DELETE'])
def remove_item(item_id):
    settings = get_site_settings()
    if not _has_item(item_id):
        return _error(settings.api_messages.item_not_found_error, 404)

    builder = _builder(settings)
    items = builder.panel.remove_item(item_id)
    builder.unmount()
    return jsonify(_cart_body(items))


@enquiry_bp.route('/items', methods=['DELETE'])
def clear_items():
    builder = _builder(get_site_settings())
    builder.panel.clear()
    builder.unmount()
    return jsonify(_cart_body(get_enquiry_context().store.read()))


@enquiry_bp.route('/pdf', methods=['POST'])
def export_pdf():
    settings = get_site_settings()
    messages = settings.api_messages
    data = request.get_json(silent=True)
    try:
        document_request = DocumentRequest.model_validate(data or {})
    except ValidationError as e:
        return _error(messages.validation_error, 400, _issues(e))

    builder = _builder(settings)
    try:
        if document_request.items:
            document = render_enquiry_pdf(document_request.items, user_details=document_request.user_details,
                                          template=settings.pdf_template)
        else:
            document = builder.panel.export_pdf(user_details=document_request.user_details,
                                                template=settings.pdf_template)
    except EmptyEnquiry:
        return _error(messages.empty_enquiry_error, 400)
    except Exception as e:
        current_app.logger.error(f'Enquiry PDF generation failed: {e}', exc_info=True)
        return _error(messages.pdf_generation_error, 500)
    finally:
        builder.unmount()

    return send_file(io.BytesIO(document.content), mimetype=document.mimetype,
                     as_attachment=True, download_name=document.filename)


@enquiry_bp.route('/handoff', methods=['POST'])
def handoff_to_trade_form():
    settings = get_site_settings()
    builder = _builder(settings)
    try:
        location = builder.submit_to_trade_form()
    except EmptyEnquiry:
        return _error(settings.api_messages.empty_enquiry_error, 400)
    finally:
        builder.unmount()
    return jsonify({'success': True, 'redirect': location})
