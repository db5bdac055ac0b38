# newsengine/identity.py
"""
Caller identity. The engine never inspects credentials itself: a bearer token
is handed to the external identity provider, which answers with a user id or
rejects it.
"""
from __future__ import annotations

from typing import Optional

import httpx

from .errors import IdentityUnavailableError
from .logging_setup import get_logger

logger = get_logger("newsengine.identity")


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class IdentityProvider:
    def resolve(self, token: str) -> Optional[str]:
        """User id for a valid token, None for an invalid one."""
        raise NotImplementedError

    def close(self) -> None:
        pass


class DisabledIdentityProvider(IdentityProvider):
    """Used when no provider is configured: every credential is rejected."""

    def resolve(self, token: str) -> Optional[str]:
        return None


class RemoteIdentityProvider(IdentityProvider):
    """
    GoTrue-style user endpoint (``GET {auth_url}/auth/v1/user``) answering
    200 with ``{"id": ...}`` for a valid token and 401/403 otherwise.
    """

    def __init__(self, auth_url: str, api_key: str = "", timeout: float = 5.0,
                 client: Optional[httpx.Client] = None):
        self.user_url = auth_url.rstrip("/") + "/auth/v1/user"
        self.api_key = api_key
        self.client = client or httpx.Client(timeout=timeout)

    def resolve(self, token: str) -> Optional[str]:
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        try:
            r = self.client.get(self.user_url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("IDENTITY_PROVIDER_UNREACHABLE", extra={"error": type(e).__name__})
            raise IdentityUnavailableError(str(e)) from e

        if r.status_code in (401, 403):
            return None
        if r.status_code != 200:
            logger.error("IDENTITY_PROVIDER_ERROR", extra={"status_code": r.status_code})
            raise IdentityUnavailableError(f"identity provider answered {r.status_code}")

        try:
            payload = r.json()
        except ValueError as e:
            logger.error("IDENTITY_PROVIDER_BAD_RESPONSE", extra={"status_code": r.status_code})
            raise IdentityUnavailableError("identity provider answered non-JSON") from e
        if not isinstance(payload, dict):
            raise IdentityUnavailableError("identity provider answered an unexpected shape")
        user_id = payload.get("id")
        return str(user_id) if user_id else None

    def close(self) -> None:
        self.client.close()


def identity_from_settings(settings) -> IdentityProvider:
    if settings.auth_url:
        return RemoteIdentityProvider(settings.auth_url, settings.auth_api_key)
    logger.warning("No AUTH_URL configured; identity-required endpoints will answer 401")
    return DisabledIdentityProvider()
