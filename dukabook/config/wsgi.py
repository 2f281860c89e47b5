"""
WSGI config for the dukabook project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'dukabook.config.settings')

application = get_wsgi_application()
