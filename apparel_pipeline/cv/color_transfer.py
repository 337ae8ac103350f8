"""
Color Transfer Module

Recolors a generated neutral-color garment template toward a target RGB.

Text-to-image prompts reproduce exact hues poorly, so templates are
generated in a fixed reference color and shifted afterwards:

1. Pixels with every channel >= threshold are background
2. Mean RGB is measured over foreground pixels only
3. Every foreground pixel is shifted by (target - mean), clamped to 0-255
4. Background pixels and any alpha channel stay bit-identical

Lossless formats (PNG, the generator default) keep the background
bit-identical in the encoded output. JPEG templates are re-encoded lossily,
so their background is preserved only to within compression noise.
"""
import io
import logging
from typing import Optional, Tuple
import numpy as np
from PIL import Image

from apparel_pipeline.core.config import settings

logger = logging.getLogger(__name__)


class ColorTransferRecolorer:
    """Shift foreground pixel colors toward a target average color."""

    def __init__(self, background_threshold: Optional[int] = None, jpeg_quality: int = 95):
        """
        Initialize recolorer.

        Args:
            background_threshold: Channel value at or above which all three
                                  channels mark a pixel as background
            jpeg_quality: Quality used when re-encoding JPEG output
        """
        self.background_threshold = (
            settings.BACKGROUND_THRESHOLD if background_threshold is None else background_threshold
        )
        self.jpeg_quality = jpeg_quality

    def foreground_mask(self, pixels: np.ndarray) -> np.ndarray:
        """Boolean (H x W) mask, True where any RGB channel is below threshold."""
        rgb = pixels[..., :3]
        return ~np.all(rgb >= self.background_threshold, axis=-1)

    def recolor_array(
        self,
        pixels: np.ndarray,
        target: Tuple[int, int, int]
    ) -> Optional[np.ndarray]:
        """
        Recolor a decoded RGB or RGBA array.

        Args:
            pixels: uint8 array (H x W x 3 or H x W x 4)
            target: Target (r, g, b)

        Returns:
            New recolored array, or None if there are no foreground pixels
        """
        mask = self.foreground_mask(pixels)
        count = int(mask.sum())
        if count == 0:
            logger.info("No foreground pixels found, leaving image unchanged")
            return None

        foreground = pixels[mask, :3].astype(np.float64)
        mean = foreground.mean(axis=0)
        shift = np.asarray(target, dtype=np.float64) - mean

        logger.debug(
            f"Color transfer: {count} foreground pixels, "
            f"mean={np.round(mean, 1).tolist()}, shift={np.round(shift, 1).tolist()}"
        )

        out = pixels.copy()
        out[mask, :3] = np.clip(np.rint(foreground + shift), 0, 255).astype(np.uint8)
        return out

    def recolor(self, image_bytes: bytes, target: Tuple[int, int, int]) -> bytes:
        """
        Recolor an encoded template image.

        Args:
            image_bytes: Encoded template (garment on near-white background)
            target: Target (r, g, b)

        Returns:
            Re-encoded image in the input's format, or the input bytes
            themselves when there is nothing to recolor. JPEG output is
            re-compressed, so background pixels may drift slightly

        Raises:
            ValueError: If the bytes are not a decodable image
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except Image.UnidentifiedImageError as e:
            raise ValueError(f"Invalid template image: {e}")

        image_format = image.format or "PNG"

        if image.mode not in ("RGB", "RGBA"):
            has_alpha = "A" in image.mode or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")

        pixels = np.array(image)
        recolored = self.recolor_array(pixels, target)
        if recolored is None:
            return image_bytes

        output = io.BytesIO()
        save_kwargs = {"quality": self.jpeg_quality} if image_format == "JPEG" else {}
        Image.fromarray(recolored).save(output, format=image_format, **save_kwargs)
        return output.getvalue()


def create_recolorer(background_threshold: Optional[int] = None) -> ColorTransferRecolorer:
    """
    Factory function to create color transfer recolorer.

    Args:
        background_threshold: Override for the configured threshold

    Returns:
        ColorTransferRecolorer instance
    """
    return ColorTransferRecolorer(background_threshold=background_threshold)
