import io

import pytest
from PIL import Image, ImageCms

from core.config import DerivationSettings
from core.imaging.derivation import (
    EXIF_ORIENTATION_TAG,
    decode_image,
    render_original,
    render_resized,
    render_tiers,
)
from core.models.errors import DecodeError
from core.models.image import Tier


def _open(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class TestDecodeImage:
    def test_decodes_jpeg(self, image_factory) -> None:
        decoded = decode_image(image_factory((40, 30)))

        assert decoded.size == (40, 30)
        assert decoded.source_format == "JPEG"
        assert decoded.image.mode == "RGB"

    def test_applies_exif_orientation(self, image_factory) -> None:
        # Orientation 6 means the stored pixels are rotated 90 degrees
        decoded = decode_image(image_factory((40, 30), orientation=6))

        assert decoded.size == (30, 40)

    def test_orientation_tag_is_dropped(self, image_factory) -> None:
        decoded = decode_image(image_factory((40, 30), orientation=6))

        if decoded.exif:
            exif = Image.Exif()
            exif.load(decoded.exif)
            assert EXIF_ORIENTATION_TAG not in exif

    def test_alpha_is_flattened_on_white(self, sample_png_binary) -> None:
        decoded = decode_image(sample_png_binary)

        assert decoded.image.mode == "RGB"
        assert decoded.source_format == "PNG"

    def test_palette_image_is_converted(self) -> None:
        buffer = io.BytesIO()
        Image.new("P", (10, 10)).save(buffer, format="GIF")

        assert decode_image(buffer.getvalue()).image.mode == "RGB"

    @pytest.mark.parametrize(
        "payload",
        [
            b"",
            b"definitely not an image",
            b"%PDF-1.4 not an image either",
        ],
    )
    def test_undecodable_payload_raises(self, payload) -> None:
        with pytest.raises(DecodeError) as exc:
            decode_image(payload)

        assert exc.value.error_code == "IMAGE_DECODE_FAILED"
        assert "cause" in exc.value.details

    def test_truncated_jpeg_raises(self, image_factory) -> None:
        data = image_factory((200, 200))

        with pytest.raises(DecodeError):
            decode_image(data[: len(data) // 3])

    def test_decompression_bomb_raises(self, image_factory, monkeypatch) -> None:
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        with pytest.raises(DecodeError) as exc:
            decode_image(image_factory((400, 400)))

        assert exc.value.details["cause"] == "decompression bomb"


class TestRenderTiers:
    def test_large_landscape_image_bounds(self, image_factory) -> None:
        decoded = decode_image(image_factory((4000, 3000)))

        tiers = render_tiers(decoded, DerivationSettings())

        assert (tiers[Tier.ORIGINAL].width, tiers[Tier.ORIGINAL].height) == (4000, 3000)
        assert (tiers[Tier.PREVIEW].width, tiers[Tier.PREVIEW].height) == (2048, 1536)
        assert (tiers[Tier.THUMB].width, tiers[Tier.THUMB].height) == (1024, 768)

    def test_portrait_bounds_longest_edge(self, image_factory) -> None:
        decoded = decode_image(image_factory((600, 1200)))
        settings = DerivationSettings(preview_max_edge=400, thumb_max_edge=100)

        tiers = render_tiers(decoded, settings)

        assert (tiers[Tier.PREVIEW].width, tiers[Tier.PREVIEW].height) == (200, 400)
        assert (tiers[Tier.THUMB].width, tiers[Tier.THUMB].height) == (50, 100)

    def test_small_image_is_never_upscaled(self, image_factory) -> None:
        decoded = decode_image(image_factory((300, 200)))

        tiers = render_tiers(decoded, DerivationSettings())

        for variant in tiers.values():
            assert (variant.width, variant.height) == (300, 200)

    def test_tier_dimensions_are_ordered(self, image_factory) -> None:
        decoded = decode_image(image_factory((2500, 900)))

        tiers = render_tiers(decoded, DerivationSettings())

        original, preview, thumb = (tiers[t] for t in (Tier.ORIGINAL, Tier.PREVIEW, Tier.THUMB))
        assert thumb.width <= preview.width <= original.width
        assert thumb.height <= preview.height <= original.height

    def test_every_tier_is_jpeg(self, sample_png_binary) -> None:
        tiers = render_tiers(decode_image(sample_png_binary), DerivationSettings())

        for variant in tiers.values():
            image = _open(variant.data)
            assert image.format == "JPEG"
            assert image.size == (variant.width, variant.height)
            assert variant.byte_size == len(variant.data)

    def test_orientation_shared_by_all_tiers(self, image_factory) -> None:
        decoded = decode_image(image_factory((3000, 1000), orientation=8))

        tiers = render_tiers(decoded, DerivationSettings())

        for variant in tiers.values():
            assert variant.height > variant.width


class TestRenderers:
    def test_render_original_keeps_icc_profile(self) -> None:
        profile = ImageCms.ImageCmsProfile(ImageCms.createProfile("sRGB")).tobytes()
        buffer = io.BytesIO()
        Image.new("RGB", (20, 20), (10, 20, 30)).save(buffer, format="JPEG", icc_profile=profile)

        decoded = decode_image(buffer.getvalue())
        rendered = _open(render_original(decoded, quality=95).data)

        assert rendered.info.get("icc_profile") == profile

    def test_render_original_drops_profile_of_converted_cmyk_source(self) -> None:
        source_profile = b"cmyk-press-profile"
        buffer = io.BytesIO()
        Image.new("CMYK", (20, 20), (0, 128, 255, 0)).save(
            buffer, format="JPEG", icc_profile=source_profile
        )
        assert _open(buffer.getvalue()).info.get("icc_profile") == source_profile

        decoded = decode_image(buffer.getvalue())
        rendered = _open(render_original(decoded, quality=95).data)

        assert decoded.icc_profile is None
        assert rendered.mode == "RGB"
        assert "icc_profile" not in rendered.info

    def test_render_resized_strips_metadata(self, image_factory) -> None:
        decoded = decode_image(image_factory((500, 400), orientation=1))

        rendered = _open(render_resized(decoded, max_edge=100, quality=80).data)

        assert "exif" not in rendered.info
        assert "icc_profile" not in rendered.info

    def test_render_resized_does_not_mutate_decoded(self, image_factory) -> None:
        decoded = decode_image(image_factory((500, 400)))

        render_resized(decoded, max_edge=50, quality=80)

        assert decoded.size == (500, 400)
