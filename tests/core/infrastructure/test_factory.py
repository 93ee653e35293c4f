import pytest

from core.infrastructure.aws.s3_variant_storage import S3VariantStorage
from core.infrastructure.factory import build_storage
from core.infrastructure.local.filesystem_storage import LocalVariantStorage
from core.utils.constants import ENV_STORAGE_BACKEND, ENV_VARIANT_STORAGE_ROOT


def test_defaults_to_s3(monkeypatch, aws_mock) -> None:
    monkeypatch.delenv(ENV_STORAGE_BACKEND, raising=False)

    assert isinstance(build_storage(), S3VariantStorage)


def test_local_backend(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv(ENV_STORAGE_BACKEND, " Local ")
    monkeypatch.setenv(ENV_VARIANT_STORAGE_ROOT, str(tmp_path))

    storage = build_storage()

    assert isinstance(storage, LocalVariantStorage)
    assert storage.root == tmp_path.resolve()


def test_unknown_backend(monkeypatch) -> None:
    monkeypatch.setenv(ENV_STORAGE_BACKEND, "ftp")

    with pytest.raises(RuntimeError, match="ftp"):
        build_storage()
