# services/identity.py
import logging
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2 import id_token
from supabase import create_client

LOGGER = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class SupabaseVerifier:
    """Resolves a Supabase access token to the user's id."""

    def __init__(self, url: str, key: str, client=None):
        self.client = client or create_client(url, key)

    def verify(self, token: str) -> Optional[str]:
        response = self.client.auth.get_user(token)
        user = getattr(response, "user", None)
        return user.id if user else None


class GoogleVerifier:
    """Resolves a Google ID token to its subject claim."""

    def __init__(self, client_id: str):
        self.client_id = client_id

    def verify(self, token: str) -> Optional[str]:
        idinfo = id_token.verify_oauth2_token(token, Request(), self.client_id)
        return idinfo.get("sub")


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class IdentityResolver:
    def __init__(self, verifier=None):
        self.verifier = verifier

    def resolve(self, authorization: Optional[str]) -> Optional[str]:
        """
        Return the caller's account id, or None for an anonymous guest.

        Verification failures are logged and treated as anonymous; this
        method does not raise.
        """
        token = extract_bearer_token(authorization)
        if token is None or self.verifier is None:
            return None

        try:
            account_id = self.verifier.verify(token)
        except Exception as e:
            LOGGER.warning("Auth verification error: %s", e)
            return None

        if account_id:
            LOGGER.info("Authenticated user: %s", account_id)
        return account_id or None


def build_resolver(settings) -> IdentityResolver:
    backend = settings.identity_backend

    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_role_key:
            LOGGER.warning("Supabase is not configured; every caller is treated as a guest.")
            return IdentityResolver()
        return IdentityResolver(SupabaseVerifier(settings.supabase_url, settings.supabase_service_role_key))

    if backend == "google":
        if not settings.google_client_id:
            LOGGER.warning("GOOGLE_CLIENT_ID is not set; every caller is treated as a guest.")
            return IdentityResolver()
        return IdentityResolver(GoogleVerifier(settings.google_client_id))

    return IdentityResolver()
