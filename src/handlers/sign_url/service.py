"""
Business logic for minting signed variant URLs.

The signer works on canonical paths only; this service turns an asset
identifier and a tier into that path. It does not check that the variant
exists.
"""

from aws_lambda_powertools import Logger

from core.config import SignerSettings, load_signer_settings
from core.models.access import SignedUrl
from core.models.image import Tier
from core.signing.signer import CapabilitySigner
from core.utils.paths import variant_path

logger = Logger(UTC=True)


class SignUrlService:
    """Application service that mints capability URLs for asset tiers."""

    def __init__(
        self,
        signer: CapabilitySigner | None = None,
        settings: SignerSettings | None = None,
    ) -> None:
        self.signer = signer or CapabilitySigner.from_settings(
            settings or load_signer_settings()
        )

    def sign(
        self,
        image_id: str,
        *,
        tier: Tier = Tier.PREVIEW,
        ttl_minutes: int | None = None,
    ) -> SignedUrl:
        """Mint a signed URL for one tier of an asset.

        Args:
            image_id: Asset identifier
            tier: Tier to grant access to
            ttl_minutes: Token lifetime; the configured default if None

        Returns:
            SignedUrl for ``<tier>/<image_id>.jpg``
        """
        path = variant_path(tier, image_id)
        signed = self.signer.mint(path, ttl_minutes)

        logger.info(
            "Signed URL minted",
            extra={"path": path, "expires": signed.expires},
        )

        return signed
