"""
Service-account access tokens via the OAuth2 JWT-bearer grant.

`build_assertion` turns a credential and a point in time into a signed
RS256 JWT; `TokenProvider` exchanges that assertion for a bearer token at
Google's token endpoint and keeps it in a single in-memory slot until it
is about to expire.
"""
import base64
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from google.auth import crypt

from credentials import ServiceAccountCredential
from errors import AuthError

logger = logging.getLogger(__name__)

SPREADSHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME = 3600
EXPIRY_MARGIN = 5  # seconds a cached token must still have left to be reused


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at: int

    def is_fresh(self, now: int) -> bool:
        return self.expires_at - EXPIRY_MARGIN > now


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_json(obj) -> str:
    return _b64url(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def build_assertion(
    credential: ServiceAccountCredential,
    now: int,
    scope: str = SPREADSHEETS_SCOPE,
    audience: Optional[str] = None,
    lifetime: int = ASSERTION_LIFETIME,
) -> str:
    """Return the signed `header.claims.signature` assertion for `credential` at `now`."""
    header = {"alg": "RS256", "typ": "JWT"}
    claims = {
        "iss": credential.client_email,
        "scope": scope,
        "aud": audience or credential.token_uri,
        "iat": now,
        "exp": now + lifetime,
    }
    unsigned = f"{_b64url_json(header)}.{_b64url_json(claims)}"

    try:
        signer = crypt.RSASigner.from_string(credential.private_key)
    except (ValueError, TypeError, IndexError) as e:
        raise AuthError(f"unusable private key for {credential.client_email}: {e}") from e

    signature = signer.sign(unsigned.encode("ascii"))
    return f"{unsigned}.{_b64url(signature)}"


class TokenProvider:
    """Caches one access token for a service account and refreshes it on demand."""

    def __init__(
        self,
        credential: ServiceAccountCredential,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 10.0,
        scope: str = SPREADSHEETS_SCOPE,
        lifetime: int = ASSERTION_LIFETIME,
    ):
        self.credential = credential
        self.session = session or requests.Session()
        self.clock = clock
        self.timeout = timeout
        self.scope = scope
        self.lifetime = lifetime
        self._cached: Optional[CachedToken] = None
        self._refresh_lock = threading.Lock()

    @property
    def cached(self) -> Optional[CachedToken]:
        return self._cached

    def invalidate(self):
        """Forget the cached token so the next call performs a fresh exchange."""
        self._cached = None

    def get_access_token(self) -> str:
        cached = self._cached
        if cached is not None and cached.is_fresh(int(self.clock())):
            return cached.access_token

        with self._refresh_lock:
            # another request may have refreshed while we waited
            now = int(self.clock())
            cached = self._cached
            if cached is not None and cached.is_fresh(now):
                return cached.access_token

            self._cached = self._exchange(now)
            return self._cached.access_token

    def _exchange(self, now: int) -> CachedToken:
        assertion = build_assertion(self.credential, now, scope=self.scope, lifetime=self.lifetime)
        logger.info(f"Requesting access token for {self.credential.client_email}")

        try:
            response = self.session.post(
                self.credential.token_uri,
                data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"token endpoint unreachable: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if not 200 <= response.status_code < 300:
            raise AuthError(f"HTTP {response.status_code}: {json.dumps(payload) if isinstance(payload, dict) else payload}")

        if not isinstance(payload, dict) or not payload.get("access_token") or "expires_in" not in payload:
            raise AuthError(f"malformed token response: {payload}")

        try:
            expires_in = int(payload["expires_in"])
        except (TypeError, ValueError):
            raise AuthError(f"malformed expires_in in token response: {payload['expires_in']!r}") from None

        logger.info(f"Access token obtained, valid for {expires_in}s")
        return CachedToken(access_token=payload["access_token"], expires_at=now + expires_in)
