"""
WSGI config for bandplanner project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bandplanner.settings')

application = get_wsgi_application()
