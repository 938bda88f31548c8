"""
ASGI config for the Prism Craft Studio API.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'craftstudio.config.settings')

application = get_asgi_application()
