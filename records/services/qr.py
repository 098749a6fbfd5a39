"""
QR image encoding for lookup URLs.

The encoding itself is delegated to the ``qrcode`` library; this module
only pins the visual parameters (medium error correction, one-module
border, black on white, square PNG) and packs the result as a data URL
the admin UI can drop straight into an ``<img>`` tag.
"""
from __future__ import annotations

import base64
import io

import qrcode
from django.conf import settings
from PIL import Image
from qrcode.image.pil import PilImage
from qrcode.constants import ERROR_CORRECT_M

from records.exceptions import DependencyError


class QRGenerationError(DependencyError):
    default_message = 'Failed to generate QR code'


def generate_qr_png(url: str, size: int | None = None) -> bytes:
    size = size or settings.QR_IMAGE_SIZE
    try:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=10, border=1,
                           image_factory=PilImage)
        qr.add_data(url)
        qr.make(fit=True)
        img = qr.make_image(fill_color='black', back_color='white').get_image()
        img = img.convert('RGB').resize((size, size), Image.Resampling.NEAREST)
        buf = io.BytesIO()
        img.save(buf, format='PNG')
    except Exception as e:
        raise QRGenerationError(f'Failed to generate QR code: {e}') from e
    return buf.getvalue()


def generate_qr_data_url(url: str, size: int | None = None) -> str:
    png = generate_qr_png(url, size)
    return 'data:image/png;base64,' + base64.b64encode(png).decode('ascii')
