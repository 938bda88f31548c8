"""
WSGI config for the Prism Craft Studio API.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'craftstudio.config.settings')

application = get_wsgi_application()
