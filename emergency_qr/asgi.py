"""
ASGI config for the emergency_qr project.

Order matters: configure Django before importing any Django-dependent modules.
"""
import os

# 1) Configure settings before any Django import
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "emergency_qr.settings")

# 2) Build the HTTP app (this runs django.setup())
from django.core.asgi import get_asgi_application  # noqa: E402

application = get_asgi_application()

# 3) Open the record store; fatal in prod, degraded in dev
from records.startup import open_store  # noqa: E402

open_store()
