"""Canonical variant paths and the signing payload.

Every path that is signed, verified, stored or served goes through
`canonicalize_path`. The signer and the access gate both build the MAC input
with `signing_payload`, so the bytes signed at mint time and the bytes
checked at verify time come from the same function.
"""

import re

from core.models.image import Tier, VariantPaths
from core.utils.constants import VARIANT_EXTENSION

_EXPIRY_PATTERN = re.compile(r"^[0-9]{1,20}$")
_KNOWN_SUFFIXES = (".jpg", ".jpeg")


def canonicalize_path(path: str) -> str:
    """Return the canonical form of a storage-relative path.

    Leading slashes are removed; nothing else is rewritten. The path is
    expected to be already percent-decoded by the dispatcher.

    Raises:
        ValueError: If the path is empty or contains traversal segments
    """
    if not isinstance(path, str):
        raise TypeError("path must be a string")

    candidate = path.lstrip("/")
    if not candidate:
        raise ValueError("Invalid file path: path is empty")

    if "\\" in candidate or "\x00" in candidate:
        raise ValueError("Invalid file path: illegal character")

    if any(segment in ("", ".", "..") for segment in candidate.split("/")):
        raise ValueError("Invalid file path: illegal path segment")

    return candidate


def variant_path(tier: Tier, image_id: str) -> str:
    """Build the canonical path of one tier of an asset."""
    return f"{tier.value}/{image_id}.{VARIANT_EXTENSION}"


def variant_paths(image_id: str) -> VariantPaths:
    return VariantPaths(
        original=variant_path(Tier.ORIGINAL, image_id),
        preview=variant_path(Tier.PREVIEW, image_id),
        thumb=variant_path(Tier.THUMB, image_id),
    )


def tier_of(path: str) -> Tier | None:
    """Return the tier named by the leading segment, or None if unknown."""
    leading = canonicalize_path(path).split("/", 1)[0]
    try:
        return Tier(leading)
    except ValueError:
        return None


def signing_payload(path: str, expires_at_ms: int) -> bytes:
    """Build the exact MAC input ``<canonical path>:<expiry ms>``."""
    return f"{canonicalize_path(path)}:{int(expires_at_ms)}".encode("utf-8")


def parse_expiry(raw: str | int) -> int | None:
    """Parse an ``expires`` query value; None if it is not a decimal integer."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if not isinstance(raw, str) or not _EXPIRY_PATTERN.match(raw):
        return None
    return int(raw)


def strip_file_key_suffix(file_key: str) -> str:
    """Drop a trailing ``.jpg``/``.jpeg`` that clients sometimes include."""
    lowered = file_key.lower()
    for suffix in _KNOWN_SUFFIXES:
        if lowered.endswith(suffix):
            return file_key[: -len(suffix)]
    return file_key
