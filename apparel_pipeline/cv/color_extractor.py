"""
Color Extraction Module

Extracts the dominant color of a garment crop as RGB, a lowercase hex
string and a human-readable color name.
"""
import logging
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass

from apparel_pipeline.schemas.detection import DominantColor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorDescriptor:
    """Color information for a garment region."""
    r: int
    g: int
    b: int
    hex: str  # "#rrggbb", lowercase
    color_name: str  # Display name from the palette lookup

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


def clamp_channel(value: float) -> int:
    """Round a channel value and clamp it to 0-255."""
    return max(0, min(255, int(round(value))))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Encode RGB as "#rrggbb" with lowercase, zero-padded digits."""
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Decode "#rrggbb" (leading # optional) into an RGB tuple."""
    value = hex_color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


class PaletteColorNamer:
    """
    Nearest-named-color lookup over a fixed palette.

    Distance is squared RGB distance. Ties go to the entry listed first.
    """

    PALETTE: Dict[str, Tuple[int, int, int]] = {
        "black": (0, 0, 0),
        "charcoal": (54, 69, 79),
        "dim gray": (105, 105, 105),
        "gray": (128, 128, 128),
        "silver": (192, 192, 192),
        "white smoke": (245, 245, 245),
        "white": (255, 255, 255),
        "ivory": (255, 255, 240),
        "beige": (245, 245, 220),
        "khaki": (195, 176, 145),
        "tan": (210, 180, 140),
        "brown": (139, 69, 19),
        "chocolate": (123, 63, 0),
        "maroon": (128, 0, 0),
        "burgundy": (128, 0, 32),
        "crimson": (220, 20, 60),
        "red": (255, 0, 0),
        "coral": (255, 127, 80),
        "salmon": (250, 128, 114),
        "orange": (255, 165, 0),
        "mustard": (255, 219, 88),
        "gold": (255, 215, 0),
        "yellow": (255, 255, 0),
        "olive": (128, 128, 0),
        "lime": (50, 205, 50),
        "green": (0, 128, 0),
        "forest green": (34, 139, 34),
        "mint": (152, 255, 152),
        "teal": (0, 128, 128),
        "turquoise": (64, 224, 208),
        "sky blue": (135, 206, 235),
        "light blue": (173, 216, 230),
        "royal blue": (65, 105, 225),
        "blue": (0, 0, 255),
        "cobalt": (0, 71, 171),
        "navy": (0, 0, 128),
        "indigo": (75, 0, 130),
        "purple": (128, 0, 128),
        "violet": (143, 0, 255),
        "lavender": (230, 230, 250),
        "plum": (142, 69, 133),
        "magenta": (255, 0, 255),
        "hot pink": (255, 105, 180),
        "pink": (255, 192, 203),
    }

    def __init__(self, palette: Optional[Dict[str, Tuple[int, int, int]]] = None):
        self.palette = palette if palette is not None else self.PALETTE

    def name_for(self, hex_color: str) -> str:
        r, g, b = hex_to_rgb(hex_color)
        best_name = "unknown"
        best_distance = None

        for name, (pr, pg, pb) in self.palette.items():
            distance = (r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2
            if best_distance is None or distance < best_distance:
                best_name = name
                best_distance = distance

        return best_name


class ColorExtractor:
    """
    Extract color information from garment crops.

    The dominant color is the first entry reported by the color service;
    channels it omits default to 0 and an empty report yields black.
    """

    def __init__(self, color_service, color_namer=None):
        """
        Initialize color extractor.

        Args:
            color_service: Provider implementing dominant_colors(crop_bytes)
            color_namer: Provider implementing name_for(hex)
                         (defaults to PaletteColorNamer)
        """
        self.color_service = color_service
        self.color_namer = color_namer or PaletteColorNamer()

    def describe(self, colors: List[DominantColor]) -> ColorDescriptor:
        """Build a descriptor from an already-fetched dominant-color list."""
        if not colors:
            logger.warning("Color service returned no dominant colors, using black")
            dominant = DominantColor()
        else:
            dominant = colors[0]

        r = clamp_channel(dominant.r)
        g = clamp_channel(dominant.g)
        b = clamp_channel(dominant.b)
        hex_color = rgb_to_hex(r, g, b)

        return ColorDescriptor(
            r=r,
            g=g,
            b=b,
            hex=hex_color,
            color_name=self.color_namer.name_for(hex_color)
        )

    def extract(self, crop_bytes: bytes) -> ColorDescriptor:
        """
        Extract color descriptor from an encoded garment crop.

        Args:
            crop_bytes: Encoded crop

        Returns:
            ColorDescriptor with RGB, hex and color name

        Raises:
            ExternalServiceFailure: If the color service fails
        """
        descriptor = self.describe(self.color_service.dominant_colors(crop_bytes))
        logger.debug(f"Extracted color {descriptor.hex} ({descriptor.color_name})")
        return descriptor
