"""
Tiered access gate for variant files.

Every file request passes through `AccessGate.authorize` before any storage
access. The public tier is served unconditionally; protected tiers need a
token and expiry that verify against the exact requested path. Rejections
are decided without looking at storage, so a denial says nothing about
whether the path exists.
"""

from aws_lambda_powertools import Logger

from core.config import SignerSettings, load_signer_settings
from core.infrastructure.factory import build_storage
from core.models.access import AccessDecision, DenyReason
from core.models.errors import AccessDeniedError
from core.models.image import Access, policy_for
from core.repositories.storage_repository import VariantStorageRepository
from core.signing.signer import CapabilitySigner
from core.utils.paths import canonicalize_path, tier_of

logger = Logger(UTC=True)

DENY_MESSAGES = {
    DenyReason.MISSING_TOKEN: "A valid access token is required for this file",
    DenyReason.EXPIRED: "This link has expired. Request a new link",
    DenyReason.BAD_SIGNATURE: "Invalid access token. Request a new link",
}


class AccessGate:
    """Applies the tier policy and token verification to file requests.

    The gate holds no mutable state; the same token verifies the same way on
    every request until it expires.
    """

    def __init__(
        self,
        signer: CapabilitySigner | None = None,
        storage: VariantStorageRepository | None = None,
        settings: SignerSettings | None = None,
    ) -> None:
        self.signer = signer or CapabilitySigner.from_settings(
            settings or load_signer_settings()
        )
        self._storage = storage

    @property
    def storage(self) -> VariantStorageRepository:
        # Built lazily: a denied request never needs a storage client
        if self._storage is None:
            self._storage = build_storage()
        return self._storage

    def authorize(
        self,
        path: str,
        token: str | None = None,
        expires: str | None = None,
    ) -> AccessDecision:
        """Decide whether a request for ``path`` may be served.

        Args:
            path: Requested path as dispatched (leading slash allowed)
            token: ``token`` query parameter, if any
            expires: ``expires`` query parameter, if any

        Returns:
            AccessDecision; denied decisions carry the reason

        Raises:
            ValueError: If the path is malformed
        """
        canonical = canonicalize_path(path)
        tier = tier_of(canonical)
        access = policy_for(tier)

        if access is Access.PUBLIC:
            return AccessDecision(
                allowed=True, path=canonical, tier=tier, access=access
            )

        if not token or not expires:
            logger.info("Protected variant requested without token", extra={"path": canonical})
            return AccessDecision(
                allowed=False,
                path=canonical,
                tier=tier,
                access=access,
                reason=DenyReason.MISSING_TOKEN,
            )

        result = self.signer.verify(canonical, token, expires)

        return AccessDecision(
            allowed=result.valid,
            path=canonical,
            tier=tier,
            access=access,
            reason=result.reason,
        )

    def serve(
        self,
        path: str,
        token: str | None = None,
        expires: str | None = None,
    ) -> tuple[AccessDecision, bytes, str]:
        """Authorize a request and read the variant bytes.

        Returns:
            Tuple of (decision, content_bytes, content_type)

        Raises:
            AccessDeniedError: If the gate rejects the request
            NotFoundError: If the request is allowed but nothing is stored there
            StorageError: If the read fails
        """
        decision = self.authorize(path, token, expires)

        if not decision.allowed:
            reason = decision.reason or DenyReason.BAD_SIGNATURE
            raise AccessDeniedError(
                reason=reason.value,
                message=DENY_MESSAGES[reason],
                details={"path": decision.path},
            )

        body, content_type, _ = self.storage.get_variant(path=decision.path)

        logger.debug(
            "Serving variant",
            extra={"path": decision.path, "access": decision.access.value},
        )

        return decision, body, content_type
