"""
Bearer token authentication.

DRF calls :meth:`BearerTokenAuthentication.authenticate` for every
request. A request without a ``Bearer`` token stays anonymous and is
turned away by the permission layer (``AUTH_001``); a token that does
not verify is rejected here (``AUTH_002``). On success the verified
:class:`~core.services.auth.Identity` becomes ``request.user``.
"""
from __future__ import annotations

from typing import Optional

from rest_framework import authentication

from core.services.auth import Identity, verify_token

__all__ = ["BearerTokenAuthentication", "Identity", "get_bearer_token"]

KEYWORD = "Bearer"


def get_bearer_token(request) -> Optional[str]:
    """Return the token from ``Authorization: Bearer <token>``.

    Any other header shape counts as no token at all.
    """
    header = authentication.get_authorization_header(request).split()
    if len(header) != 2 or header[0].decode("latin-1") != KEYWORD:
        return None
    try:
        return header[1].decode("ascii")
    except UnicodeDecodeError:
        return None


class BearerTokenAuthentication(authentication.BaseAuthentication):
    keyword = KEYWORD

    def authenticate(self, request):
        token = get_bearer_token(request)
        if token is None:
            return None
        return verify_token(token), token

    def authenticate_header(self, request) -> str:
        # Keeps AUTH_001 responses at 401 instead of DRF's 403 fallback
        return f'{self.keyword} realm="api"'
