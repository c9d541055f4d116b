from __future__ import annotations

from oauth_verifier.providers.base import UnsupportedProvider

# https://developers.facebook.com/docs/apps/for-business#api
FACEBOOK_GRAPH_ENDPOINT = "https://graph.facebook.com"
FACEBOOK_WWW_ENDPOINT = "https://www.facebook.com"


class FacebookProvider(UnsupportedProvider):
    """Declared so callers can select it; every capability reports not implemented."""
