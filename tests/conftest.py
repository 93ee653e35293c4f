"""
Pytest configuration and fixtures for the tiered image service tests.
Provides environment defaults, AWS mocking, S3 fixtures with cleanup,
Pillow-generated sample images and a controllable clock.
"""

import io
import os
from collections.abc import Callable
from typing import Any

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws
from PIL import Image

TEST_SIGNING_SECRET = "test-signing-secret-0123456789abcdef"
TEST_BUCKET_NAME = "test-variant-bucket"

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("VARIANT_S3_BUCKET_NAME", TEST_BUCKET_NAME)
os.environ.setdefault("STORAGE_BACKEND", "s3")
os.environ.setdefault("SIGNED_URL_SECRET", TEST_SIGNING_SECRET)
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "TieredImageService")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "tiered-image-service")

from core.config import load_derivation_settings, load_signer_settings  # noqa: E402
from core.infrastructure.local.filesystem_storage import LocalVariantStorage  # noqa: E402
from core.signing.signer import CapabilitySigner  # noqa: E402

EXIF_ORIENTATION_TAG = 0x0112


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; every test reads the env afresh."""
    load_signer_settings.cache_clear()
    load_derivation_settings.cache_clear()
    yield
    load_signer_settings.cache_clear()
    load_derivation_settings.cache_clear()


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _cleanup_s3_objects(s3_client, bucket_name):
    """Helper to delete all objects from S3 bucket efficiently."""
    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            objects = page.get("Contents", [])
            if objects:
                delete_keys = [{"Key": obj["Key"]} for obj in objects]
                s3_client.delete_objects(
                    Bucket=bucket_name, Delete={"Objects": delete_keys}
                )
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create and manage S3 bucket for testing.

    Cleanup Strategy:
    - Objects are deleted after each test (teardown)
    - Bucket is NOT deleted (moto cleans up on context exit)
    """
    bucket_name = os.getenv("VARIANT_S3_BUCKET_NAME")

    try:
        s3_client.head_bucket(Bucket=bucket_name)
    except ClientError:
        s3_client.create_bucket(Bucket=bucket_name)

    yield s3_client

    _cleanup_s3_objects(s3_client, bucket_name)


@pytest.fixture
def s3_put_object(s3_client) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        s3_put_object("preview/img_x.jpg", image_bytes, "image/jpeg")
    """

    def _put(key: str, body: bytes, content_type: str = "image/jpeg"):
        return s3_client.put_object(
            Bucket=os.getenv("VARIANT_S3_BUCKET_NAME"),
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    return _put


@pytest.fixture
def s3_get_object(s3_client) -> Callable[[str], bytes]:
    """
    Helper to get an object from S3.

    Usage:
        content = s3_get_object("original/img_x.jpg")
    """

    def _get(key: str) -> bytes:
        response: dict[str, Any] = s3_client.get_object(
            Bucket=os.getenv("VARIANT_S3_BUCKET_NAME"),
            Key=key,
        )
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def s3_keys(s3_client) -> Callable[[], list[str]]:
    """Helper listing every key currently in the test bucket."""

    def _keys() -> list[str]:
        response = s3_client.list_objects_v2(Bucket=os.getenv("VARIANT_S3_BUCKET_NAME"))
        return sorted(obj["Key"] for obj in response.get("Contents", []))

    return _keys


@pytest.fixture
def local_storage(tmp_path) -> LocalVariantStorage:
    """Variant storage rooted in a per-test temporary directory."""
    return LocalVariantStorage(tmp_path / "uploads")


def make_image(
    size: tuple[int, int] = (64, 48),
    *,
    image_format: str = "JPEG",
    mode: str = "RGB",
    orientation: int | None = None,
    color: Any = (200, 40, 40),
) -> bytes:
    """Encode a solid-colour test image, optionally tagged with an EXIF orientation."""
    if mode in ("RGBA", "LA"):
        color = (*color[:3], 128)[: len(mode)] if isinstance(color, tuple) else color
    image = Image.new(mode, size, color)

    save_kwargs: dict[str, Any] = {"format": image_format}
    if orientation is not None:
        exif = Image.Exif()
        exif[EXIF_ORIENTATION_TAG] = orientation
        save_kwargs["exif"] = exif.tobytes()

    buffer = io.BytesIO()
    image.save(buffer, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def image_factory() -> Callable[..., bytes]:
    """Factory fixture for encoded test images. See `make_image`."""
    return make_image


@pytest.fixture
def sample_jpeg_binary() -> bytes:
    """A small valid JPEG (160x120)."""
    return make_image((160, 120))


@pytest.fixture
def sample_png_binary() -> bytes:
    """A small valid PNG with an alpha channel (90x60)."""
    return make_image((90, 60), image_format="PNG", mode="RGBA")


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, *, minutes: int = 0, seconds: int = 0, ms: int = 0) -> None:
        self.now_ms += minutes * 60_000 + seconds * 1000 + ms


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def signing_secret() -> str:
    return TEST_SIGNING_SECRET


@pytest.fixture
def signer(fake_clock) -> CapabilitySigner:
    """Signer with the test secret and a controllable clock."""
    return CapabilitySigner(
        secret=TEST_SIGNING_SECRET,
        default_ttl_minutes=30,
        mount_prefix="/files",
        clock=fake_clock,
    )
