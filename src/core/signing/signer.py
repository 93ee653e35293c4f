"""HMAC capability tokens bound to a canonical variant path.

A token is the hex HMAC-SHA256 of ``<canonical path>:<expiry ms>`` under the
configured secret. Possession of an unexpired token for a path is sufficient
to read that path; there is no subject and no server-side token state.
"""

from collections.abc import Callable
import hashlib
import hmac
from urllib.parse import urlencode

from aws_lambda_powertools import Logger

from core.config import SignerSettings
from core.models.access import DenyReason, SignedUrl, VerificationResult
from core.utils.constants import EXPIRES_QUERY_PARAM, TOKEN_QUERY_PARAM
from core.utils.paths import canonicalize_path, parse_expiry, signing_payload
from core.utils.time import ms_to_iso, now_ms

logger = Logger(UTC=True)

Clock = Callable[[], int]

_MS_PER_MINUTE = 60 * 1000


class CapabilitySigner:
    """Mints and verifies capability tokens.

    The secret is injected at construction; the signer keeps no other state
    and is safe to share between concurrent requests.
    """

    def __init__(
        self,
        *,
        secret: str,
        default_ttl_minutes: int,
        mount_prefix: str = "",
        public_base_url: str | None = None,
        clock: Clock = now_ms,
    ) -> None:
        if not secret:
            raise ValueError("Signing secret must not be empty")

        prefix = mount_prefix.strip("/")

        self._key = secret.encode("utf-8")
        self._default_ttl_minutes = default_ttl_minutes
        self._mount_prefix = f"/{prefix}" if prefix else ""
        self._base_url = (public_base_url or "").rstrip("/")
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: SignerSettings,
        *,
        clock: Clock = now_ms,
    ) -> "CapabilitySigner":
        return cls(
            secret=settings.secret,
            default_ttl_minutes=settings.default_ttl_minutes,
            mount_prefix=settings.mount_prefix,
            public_base_url=settings.public_base_url,
            clock=clock,
        )

    def sign(self, path: str, expires_at_ms: int) -> str:
        """Return the hex MAC for a path and absolute expiry."""
        return hmac.new(
            self._key,
            signing_payload(path, expires_at_ms),
            hashlib.sha256,
        ).hexdigest()

    def mint(self, path: str, ttl_minutes: int | None = None) -> SignedUrl:
        """Mint a signed URL for one canonical path.

        Args:
            path: Canonical, tier-qualified path (e.g. ``preview/img_x.jpg``)
            ttl_minutes: Lifetime in minutes; the configured default if None

        Returns:
            SignedUrl carrying token, expiry and the dereferenceable URL

        Raises:
            ValueError: If the path is not canonicalizable or the ttl is invalid
        """
        ttl = self._default_ttl_minutes if ttl_minutes is None else ttl_minutes
        if isinstance(ttl, bool) or not isinstance(ttl, int):
            raise TypeError("ttl_minutes must be an integer")
        if ttl <= 0:
            raise ValueError("Invalid ttl_minutes: must be a positive number of minutes")

        canonical = canonicalize_path(path)
        expires_at_ms = self._clock() + ttl * _MS_PER_MINUTE
        token = self.sign(canonical, expires_at_ms)

        query = urlencode(
            {TOKEN_QUERY_PARAM: token, EXPIRES_QUERY_PARAM: str(expires_at_ms)}
        )
        url = f"{self._base_url}{self._mount_prefix}/{canonical}?{query}"

        logger.debug(
            "Minted signed URL",
            extra={"path": canonical, "expires_at_ms": expires_at_ms},
        )

        return SignedUrl(
            path=canonical,
            token=token,
            expires_at_ms=expires_at_ms,
            expires=ms_to_iso(expires_at_ms),
            url=url,
        )

    def verify(self, path: str, token: str, expires: str | int) -> VerificationResult:
        """Verify a token for a path against the current time.

        Expiry is checked before the signature. Both checks run against the
        canonical form of ``path``, which must be the path that was minted.
        """
        expires_at_ms = parse_expiry(expires)
        if expires_at_ms is None:
            logger.info("Rejected token with malformed expiry", extra={"path": path})
            return VerificationResult.invalid(DenyReason.BAD_SIGNATURE)

        if self._clock() >= expires_at_ms:
            logger.info(
                "Rejected expired token",
                extra={"path": path, "expires_at_ms": expires_at_ms},
            )
            return VerificationResult.invalid(DenyReason.EXPIRED)

        candidate = self.sign(path, expires_at_ms)
        if not isinstance(token, str) or not hmac.compare_digest(
            candidate.encode("ascii"), token.encode("utf-8")
        ):
            logger.info("Rejected token with bad signature", extra={"path": path})
            return VerificationResult.invalid(DenyReason.BAD_SIGNATURE)

        return VerificationResult.ok()
