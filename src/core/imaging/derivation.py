"""Pure image transforms used to derive the three variant tiers.

The upload is decoded once; EXIF orientation is applied to the pixels at
decode time and the orientation tag is dropped, so every tier rendered from
the same handle shares one visual orientation. Rendering never touches
storage.
"""

from dataclasses import dataclass
import io

from aws_lambda_powertools import Logger
from PIL import Image, ImageOps, UnidentifiedImageError

from core.config import DerivationSettings
from core.models.errors import DecodeError
from core.models.image import Tier
from core.utils.constants import MAX_IMAGE_PIXELS

logger = Logger(UTC=True)

# Decompression bomb protection
Image.MAX_IMAGE_PIXELS = MAX_IMAGE_PIXELS

EXIF_ORIENTATION_TAG = 0x0112
JPEG_FORMAT = "JPEG"

# Source modes whose embedded profile still describes the flattened pixels
ICC_PRESERVING_MODES = ("RGB", "RGBA", "L")


@dataclass(frozen=True)
class DecodedImage:
    """An orientation-corrected, JPEG-compatible in-memory image."""

    image: Image.Image
    source_format: str | None
    exif: bytes | None
    icc_profile: bytes | None

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True)
class EncodedVariant:
    """Encoded bytes of one tier plus its pixel dimensions."""

    data: bytes
    width: int
    height: int

    @property
    def byte_size(self) -> int:
        return len(self.data)


def _flatten_to_rgb(image: Image.Image) -> Image.Image:
    """Convert to a mode the JPEG encoder accepts, compositing alpha on white."""
    if image.mode in ("RGB", "L"):
        return image

    has_alpha = image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
    if has_alpha:
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background

    return image.convert("RGB")


def _exif_without_orientation(image: Image.Image) -> bytes | None:
    exif = image.getexif()
    exif.pop(EXIF_ORIENTATION_TAG, None)
    if not len(exif):
        return None
    return exif.tobytes()


def decode_image(data: bytes) -> DecodedImage:
    """Decode an upload and apply its embedded orientation exactly once.

    Args:
        data: Raw image bytes in any format Pillow can decode

    Returns:
        DecodedImage ready to be rendered into tiers

    Raises:
        DecodeError: If the payload is empty, unrecognised, corrupt,
            truncated or larger than the decoder limit
    """
    if not data:
        raise DecodeError(
            message="Image payload is empty",
            details={"cause": "empty payload"},
        )

    try:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            source_format = source.format
            icc_profile = source.info.get("icc_profile")
            oriented = ImageOps.exif_transpose(source)
            exif = _exif_without_orientation(oriented)
    except Image.DecompressionBombError as exc:
        logger.warning("Rejected oversized image", extra={"error": str(exc)})
        raise DecodeError(
            message="Image dimensions exceed the decoder limit",
            details={"cause": "decompression bomb", "max_pixels": MAX_IMAGE_PIXELS},
        ) from exc
    except UnidentifiedImageError as exc:
        raise DecodeError(
            message="Unsupported or unrecognised image format",
            details={"cause": "unidentified image"},
        ) from exc
    except (OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(
            message="Image data is corrupt or truncated",
            details={"cause": str(exc)},
        ) from exc

    if icc_profile and oriented.mode not in ICC_PRESERVING_MODES:
        # A profile is only valid for its source color space
        logger.debug(
            "Dropping ICC profile after color conversion",
            extra={"source_mode": oriented.mode},
        )
        icc_profile = None

    return DecodedImage(
        image=_flatten_to_rgb(oriented),
        source_format=source_format,
        exif=exif,
        icc_profile=icc_profile,
    )


def _encode(image: Image.Image, **save_kwargs) -> EncodedVariant:
    buffer = io.BytesIO()
    image.save(buffer, format=JPEG_FORMAT, **save_kwargs)
    width, height = image.size
    return EncodedVariant(data=buffer.getvalue(), width=width, height=height)


def render_original(decoded: DecodedImage, *, quality: int) -> EncodedVariant:
    """Encode the archival tier at full resolution.

    EXIF (minus orientation) is preserved, as is the ICC profile when the
    source was already RGB or greyscale.
    """
    save_kwargs: dict[str, object] = {"quality": quality}
    if decoded.exif:
        save_kwargs["exif"] = decoded.exif
    if decoded.icc_profile:
        save_kwargs["icc_profile"] = decoded.icc_profile

    return _encode(decoded.image, **save_kwargs)


def render_resized(
    decoded: DecodedImage,
    *,
    max_edge: int,
    quality: int,
) -> EncodedVariant:
    """Encode a downscaled tier bounded by ``max_edge`` on both axes.

    Aspect ratio is preserved, images are never upscaled and no metadata
    is written.
    """
    resized = decoded.image.copy()
    resized.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)
    return _encode(resized, quality=quality, optimize=True)


def render_tiers(
    decoded: DecodedImage,
    settings: DerivationSettings,
) -> dict[Tier, EncodedVariant]:
    """Render all three tiers from one decoded handle."""
    return {
        Tier.ORIGINAL: render_original(decoded, quality=settings.original_quality),
        Tier.PREVIEW: render_resized(
            decoded,
            max_edge=settings.preview_max_edge,
            quality=settings.preview_quality,
        ),
        Tier.THUMB: render_resized(
            decoded,
            max_edge=settings.thumb_max_edge,
            quality=settings.thumb_quality,
        ),
    }
