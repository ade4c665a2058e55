"""
WSGI config para o projeto Tiago Delivery.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tiagodelivery.settings')

application = get_wsgi_application()
