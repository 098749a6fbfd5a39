"""
Token authentication for the admin API.

Two credentials are accepted (see ``REST_FRAMEWORK`` in settings): the
legacy DRF token sent as ``Authorization: Token <key>`` and a simplejwt
access token sent as ``Authorization: Bearer <jwt>``.  This module keeps
the former under a stable import path so that settings never import
view modules.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword.

    Listed first in the authentication classes so that its
    ``WWW-Authenticate`` header turns missing credentials into 401
    rather than 403.
    """

    keyword = 'Token'
