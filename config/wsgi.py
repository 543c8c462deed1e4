# config/wsgi.py

import os
from django.core.wsgi import get_wsgi_application

# Default settings (websockets need the ASGI entry point)
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.production')

application = get_wsgi_application()
