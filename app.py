import os

from storefront import create_app
from storefront.config import DevelopmentConfig, ProductionConfig

config_class = DevelopmentConfig if os.environ.get('FLASK_DEBUG', '0') == '1' else ProductionConfig
app = create_app(config_class)


if __name__ == '__main__':
    host = os.environ.get('HOST', '0.0.0.0')
    port = int(os.environ.get('PORT', 5000))
    app.run(host=host, port=port)
