from flask import Flask, jsonify
from flask_wtf.csrf import CSRFError, CSRFProtect
from storefront.config import Config
from storefront.utils.logging import configure_logging
from storefront.db import MongoEnquiryRepository, init_app
from storefront.ratelimit import InMemoryRateLimiter
from storefront.settings import ApiMessages
from storefront.submission import TradeEnquiryPipeline
from storefront.utils.email import SmtpNotifier

csrf = CSRFProtect()


def create_app(config_class=Config, rate_limiter=None, repository=None, notifier=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    csrf.init_app(app)
    init_app(app) # Database teardown
    configure_logging(app)

    # one limiter per process, shared by all request threads
    if rate_limiter is None:
        rate_limiter = InMemoryRateLimiter()
    if repository is None:
        repository = MongoEnquiryRepository()
    if notifier is None:
        notifier = SmtpNotifier(app.config)
    app.extensions['enquiry_rate_limiter'] = rate_limiter
    app.extensions['trade_enquiry_pipeline'] = TradeEnquiryPipeline(rate_limiter, repository, notifier)

    # Blueprints
    from storefront.routes.enquiry import enquiry_bp
    from storefront.routes.trade import trade_bp

    app.register_blueprint(enquiry_bp)
    app.register_blueprint(trade_bp)
    # public intake is rate limited and honeypot guarded instead
    csrf.exempt(trade_bp)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        return response

    @app.errorhandler(CSRFError)
    def csrf_error(e):
        return jsonify({'success': False, 'error': e.description}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({'success': False, 'error': ApiMessages().server_error}), 500

    app.logger.info('Storefront enquiry service started')
    return app
