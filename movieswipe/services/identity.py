"""Google ID token verification.

Google signs ID tokens with keys that rotate. ``google-auth`` fetches the
current certificates and checks signature, audience, issuer and expiry; the
certificate responses are cached by ``cachecontrol`` according to Google's
cache headers, so most verifications do not hit the network.
"""

import functools
import logging
from threading import RLock
from typing import Optional

import cachecontrol
import google.auth.exceptions
import google.auth.transport.requests
import google.oauth2.id_token
import requests

from movieswipe.config import Settings, settings as default_settings
from movieswipe.schemas.user import IdentityClaims
from movieswipe.services.exceptions import IdentityVerificationFailed

logger = logging.getLogger(__name__)


class IdentityTokenVerifier:
    """
    Verifies Google ID tokens against the configured OAuth client ID.

    One instance is shared by the whole process. The certificate-caching
    HTTP session is created lazily under a lock, and requests made through
    it are serialized by the same lock since ``requests`` sessions are not
    thread safe.
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.timeout = settings.IDENTITY_VERIFY_TIMEOUT_SECONDS
        self.clock_skew = settings.IDENTITY_CLOCK_SKEW_SECONDS
        self._session: Optional[requests.Session] = None
        self._lock = RLock()

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = cachecontrol.CacheControl(requests.Session())
        return self._session

    def verify(self, assertion: str) -> IdentityClaims:
        """
        Verify a Google ID token and extract its claims.

        Args:
            assertion: Serialized Google ID token

        Returns:
            Verified identity claims

        Raises:
            IdentityVerificationFailed: If the token cannot be verified
        """
        if not self.client_id:
            raise IdentityVerificationFailed("Google client ID is not configured")
        if not assertion:
            raise IdentityVerificationFailed("ID token is required")

        try:
            with self._lock:
                request = google.auth.transport.requests.Request(session=self._get_session())
                idinfo = google.oauth2.id_token.verify_oauth2_token(
                    assertion,
                    functools.partial(request, timeout=self.timeout),
                    self.client_id,
                    clock_skew_in_seconds=self.clock_skew,
                )
        except (ValueError, google.auth.exceptions.GoogleAuthError) as e:
            logger.info(f"Google token rejected: {e}")
            raise IdentityVerificationFailed(f"Failed to verify Google token: {e}")

        if not idinfo or not idinfo.get("sub"):
            raise IdentityVerificationFailed("Invalid Google ID token - no payload")

        return self.claims_from_idinfo(idinfo)

    @staticmethod
    def claims_from_idinfo(idinfo: dict) -> IdentityClaims:
        """Map a decoded Google payload onto ``IdentityClaims``."""
        aud = idinfo.get("aud")
        return IdentityClaims(
            sub=idinfo["sub"],
            email=(idinfo.get("email") or "").strip().lower(),
            # older tokens carry the flag as a string
            email_verified=idinfo.get("email_verified") in (True, "true", "True"),
            name=idinfo.get("name") or "",
            picture=idinfo.get("picture"),
            given_name=idinfo.get("given_name"),
            family_name=idinfo.get("family_name"),
            iss=idinfo.get("iss"),
            aud=aud if isinstance(aud, str) or aud is None else ",".join(aud),
            iat=int(idinfo.get("iat") or 0),
            exp=int(idinfo.get("exp") or 0),
        )

    def close(self) -> None:
        """Close the certificate-fetching HTTP session."""
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None
