"""
Unit tests for color transfer recoloring.

Tests foreground/background classification, mean shift, clamping,
the zero-foreground no-op and format preservation.
"""
import io

import numpy as np
import pytest
from PIL import Image

from apparel_pipeline.cv.color_transfer import ColorTransferRecolorer
from tests.utils import decode_pil, encode_pil


@pytest.fixture
def recolorer():
    return ColorTransferRecolorer()


def white_canvas(h=20, w=20, channels=3):
    return np.full((h, w, channels), 255, dtype=np.uint8)


@pytest.mark.unit
class TestMeanShift:
    """Test the per-channel shift applied to foreground pixels."""

    def test_shift_toward_target(self, recolorer, gray_template_png):
        output = recolorer.recolor(gray_template_png, (200, 50, 50))

        pixels = decode_pil(output)
        assert np.all(pixels[5:15, 5:15] == (200, 50, 50))

    def test_background_is_bit_identical(self, recolorer, gray_template_png):
        original = decode_pil(gray_template_png)

        pixels = decode_pil(recolorer.recolor(gray_template_png, (200, 50, 50)))

        mask = np.ones(original.shape[:2], dtype=bool)
        mask[5:15, 5:15] = False
        np.testing.assert_array_equal(pixels[mask], original[mask])

    def test_shift_uses_foreground_mean(self, recolorer):
        pixels = white_canvas()
        pixels[0:5, 0:5] = (100, 100, 100)
        pixels[10:15, 10:15] = (200, 200, 200)

        out = decode_pil(recolorer.recolor(encode_pil(pixels), (200, 50, 50)))

        # mean is (150, 150, 150): shift is (+50, -100, -100)
        assert np.all(out[0:5, 0:5] == (150, 0, 0))
        assert np.all(out[10:15, 10:15] == (250, 100, 100))

    def test_channels_are_clamped(self, recolorer):
        pixels = white_canvas()
        pixels[0:5, 0:5] = (150, 150, 150)
        pixels[10:15, 10:15] = (100, 100, 100)

        out = recolorer.recolor_array(pixels, (255, 0, 0))

        # mean 125: shift (+130, -125, -125)
        assert np.all(out[0:5, 0:5] == (255, 25, 25))
        assert np.all(out[10:15, 10:15] == (230, 0, 0))
        assert out.dtype == np.uint8

    def test_extreme_shift_stays_in_range(self, recolorer):
        pixels = white_canvas()
        pixels[0:10] = (0, 239, 0)
        pixels[10:] = (239, 0, 239)

        out = recolorer.recolor_array(pixels, (255, 255, 255))

        assert out.min() >= 0
        assert out.max() <= 255

    def test_input_array_not_modified(self, recolorer):
        pixels = white_canvas()
        pixels[0:5, 0:5] = (100, 100, 100)
        before = pixels.copy()

        recolorer.recolor_array(pixels, (0, 0, 0))

        np.testing.assert_array_equal(pixels, before)


@pytest.mark.unit
class TestBackgroundClassification:
    """Test the background threshold."""

    def test_threshold_is_inclusive(self, recolorer):
        pixels = white_canvas()
        pixels[0, 0] = (240, 240, 240)
        pixels[1, 1] = (239, 255, 255)

        mask = recolorer.foreground_mask(pixels)

        assert not mask[0, 0]
        assert mask[1, 1]
        assert int(mask.sum()) == 1

    def test_custom_threshold(self):
        recolorer = ColorTransferRecolorer(background_threshold=200)
        pixels = white_canvas()
        pixels[0, 0] = (210, 210, 210)

        assert not recolorer.foreground_mask(pixels).any()


@pytest.mark.unit
class TestNoForeground:
    """Test the zero-foreground no-op."""

    def test_all_background_returns_input(self, recolorer):
        template = encode_pil(white_canvas())

        output = recolorer.recolor(template, (10, 20, 30))

        assert output is template

    def test_near_white_background_returns_input(self, recolorer):
        template = encode_pil(np.full((8, 8, 3), 245, dtype=np.uint8))

        assert recolorer.recolor(template, (0, 0, 0)) is template

    def test_recolor_array_returns_none(self, recolorer):
        assert recolorer.recolor_array(white_canvas(), (1, 2, 3)) is None

    def test_foreground_changes_output(self, recolorer, gray_template_png):
        assert recolorer.recolor(gray_template_png, (10, 20, 30)) != gray_template_png


@pytest.mark.unit
class TestFormats:
    """Test decoding and re-encoding."""

    def test_png_stays_png(self, recolorer, gray_template_png):
        output = recolorer.recolor(gray_template_png, (0, 128, 0))

        image = Image.open(io.BytesIO(output))
        assert image.format == "PNG"
        assert image.size == (20, 20)

    def test_jpeg_stays_jpeg(self, recolorer):
        pixels = white_canvas(32, 32)
        pixels[8:24, 8:24] = (120, 120, 120)

        output = recolorer.recolor(encode_pil(pixels, "JPEG"), (0, 0, 200))

        image = Image.open(io.BytesIO(output))
        assert image.format == "JPEG"
        assert image.size == (32, 32)

    def test_jpeg_background_drift_is_bounded(self, recolorer):
        # Garment block aligned to 16px MCUs so corner blocks are pure white
        pixels = white_canvas(64, 64)
        pixels[16:48, 16:48] = (120, 120, 120)
        source = encode_pil(pixels, "JPEG")

        out = decode_pil(recolorer.recolor(source, (0, 0, 200)))

        corners = [out[:16, :16], out[:16, 48:], out[48:, :16], out[48:, 48:]]
        for corner in corners:
            assert np.all(corner >= 240)
            assert np.abs(corner.astype(int) - 255).max() <= 3
        assert out[32, 32, 2] > out[32, 32, 0]

    def test_alpha_is_preserved(self, recolorer):
        pixels = white_canvas(channels=4)
        pixels[..., 3] = 255
        pixels[5:15, 5:15] = (150, 150, 150, 128)

        out = decode_pil(recolorer.recolor(encode_pil(pixels), (200, 50, 50)))

        assert out.shape == (20, 20, 4)
        assert np.all(out[5:15, 5:15] == (200, 50, 50, 128))
        assert np.all(out[0, 0] == (255, 255, 255, 255))

    def test_grayscale_input_is_converted(self, recolorer):
        pixels = np.full((10, 10), 255, dtype=np.uint8)
        pixels[2:8, 2:8] = 100

        out = decode_pil(recolorer.recolor(encode_pil(pixels), (100, 200, 50)))

        assert out.shape == (10, 10, 3)
        assert np.all(out[2:8, 2:8] == (100, 200, 50))

    def test_invalid_bytes(self, recolorer):
        with pytest.raises(ValueError, match="Invalid template image"):
            recolorer.recolor(b"not an image", (0, 0, 0))
