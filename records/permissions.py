"""
Access gate for the records API.

The gate is binary: a request either carries a valid credential or it
does not.  There is no per-record ownership and no role check.
"""
from rest_framework.permissions import BasePermission, IsAuthenticated, SAFE_METHODS


class ReadOnly(BasePermission):
    """Allow read-only access (GET, HEAD, OPTIONS)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return request.method in SAFE_METHODS


# Public scan reads, authenticated writes on the same URL
PublicReadAuthenticatedWrite = IsAuthenticated | ReadOnly
