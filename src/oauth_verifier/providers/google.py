from __future__ import annotations

from oauth_verifier.providers.base import UnsupportedProvider


class GoogleProvider(UnsupportedProvider):
    """Declared so callers can select it; every capability reports not implemented."""
