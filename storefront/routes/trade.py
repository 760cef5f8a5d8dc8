from flask import Blueprint, current_app, jsonify, request

from storefront.enquiry.context import get_enquiry_context
from storefront.ratelimit import resolve_identity
from storefront.settings import get_site_settings

trade_bp = Blueprint('trade', __name__)


def _request_metadata(identity, unknown_label):
    ip_address = None
    if identity != unknown_label:
        ip_address = identity.split(',')[0].strip()[:45]
    return {
        'ip_address': ip_address,
        'user_agent': request.headers.get('User-Agent'),
    }


@trade_bp.route('/enquiries/trade', methods=['POST'])
def submit_trade_enquiry():
    settings = get_site_settings()
    unknown_label = settings.api_config.unknown_ip_label
    identity = resolve_identity(request.headers, unknown_label)

    pipeline = current_app.extensions['trade_enquiry_pipeline']
    outcome = pipeline.submit(
        request.get_json(silent=True),
        identity,
        settings,
        metadata=_request_metadata(identity, unknown_label),
    )
    return jsonify(outcome.to_response()), outcome.status_code


@trade_bp.route('/contact/trade/prefill', methods=['GET'])
def trade_form_prefill():
    settings = get_site_settings()
    ctx = get_enquiry_context()
    form = ctx.trade_form(settings.form_labels).mount()
    if request.args.get('fromCart') == '1':
        ctx.signals.populate_enquiry_form.publish()
    body = form.to_dict()
    form.unmount()
    return jsonify(body)
