import os
from dotenv import load_dotenv

# Load .env from project root
basedir = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
env_path = os.path.join(basedir, '.env')
load_dotenv(env_path)


def _int_env(name, default=None):
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    return int(value)


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'divyansh_secret_key')
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'

    # MongoDB Atlas configuration
    MONGODB_URI = os.environ.get('MONGODB_URI', '')
    MONGODB_DATABASE = os.environ.get('MONGODB_DATABASE', 'divyansh')

    # SMTP for enquiry notifications
    EMAIL_HOST = os.environ.get('EMAIL_HOST')
    EMAIL_PORT = _int_env('EMAIL_PORT', 587)
    EMAIL_USERNAME = os.environ.get('EMAIL_USERNAME')
    EMAIL_PASSWORD = os.environ.get('EMAIL_PASSWORD')
    EMAIL_USE_TLS = os.environ.get('EMAIL_USE_TLS', '1') == '1'
    EMAIL_FROM = os.environ.get('EMAIL_FROM')
    CONTACT_EMAIL = os.environ.get('CONTACT_EMAIL')

    # CMS-editable site settings (messages, thresholds, templates)
    SITE_SETTINGS = None
    SITE_SETTINGS_FILE = os.environ.get('SITE_SETTINGS_FILE')

    # Deployment overrides; None means "use the CMS value or the default"
    RATE_LIMIT_MAX_REQUESTS = _int_env('RATE_LIMIT_MAX_REQUESTS')
    RATE_LIMIT_WINDOW_MS = _int_env('RATE_LIMIT_WINDOW_MS')

    ENQUIRY_STORAGE_KEY = os.environ.get('ENQUIRY_STORAGE_KEY', 'divyansh_enquiry')
    ENQUIRY_HANDOFF_KEY = os.environ.get('ENQUIRY_HANDOFF_KEY', 'pendingEnquiryPopulation')
    TRADE_FORM_URL = '/contact?type=trade'

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False
    MONGODB_URI = ''
    EMAIL_HOST = None
    SITE_SETTINGS_FILE = None
