from __future__ import annotations

import uuid

from django.conf import settings


def build_lookup_url(record_id: uuid.UUID | str, base_url: str | None = None) -> str:
    """Return the scan URL encoded into an employee's QR code.

    Called once, when the record is created; the result is stored and
    never regenerated.
    """
    base = (base_url if base_url is not None else settings.BASE_URL).rstrip('/')
    return f"{base}/employee/{record_id}"
