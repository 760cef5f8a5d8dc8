import os

wsgi_app = 'app:app'
# threads share one process-local rate limiter; more workers means more buckets
workers = int(os.environ.get('GUNICORN_WORKERS', '1'))
threads = int(os.environ.get('GUNICORN_THREADS', '4'))
bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')
timeout = 120
worker_class = 'gthread'
accesslog = '-'
errorlog = '-'
loglevel = 'info'
