"""
WSGI config for the emergency_qr project.

It exposes the WSGI callable as a module-level variable named ``application``
and opens the record store before the first request is served.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

# Set the default settings module for the 'django' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'emergency_qr.settings')

# Obtain the WSGI application for use by the server
application = get_wsgi_application()

from records.startup import open_store  # noqa: E402

open_store()
