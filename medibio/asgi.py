"""
ASGI config for the MediBio project.  HTTP only.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "medibio.settings")

application = get_asgi_application()
