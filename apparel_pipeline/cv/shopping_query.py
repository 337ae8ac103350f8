"""
Shopping Query Module

Maps a garment RGB color onto one of a small set of coarse color names
and builds the retail search string "<coarse color> <garment label>".

Coarse names are deliberately broader than the palette names used for
display, since retail search indexes only basic color words.
"""
import logging
from typing import Dict, Optional, Tuple
from urllib.parse import quote_plus

from apparel_pipeline.core.config import settings

logger = logging.getLogger(__name__)


COARSE_COLORS = (
    "black", "gray", "light gray", "white",
    "red", "orange", "brown", "pink", "yellow", "olive",
    "green", "purple", "teal", "navy", "blue",
)


class ShoppingQueryBuilder:
    """
    Classify RGB colors into coarse retail color names.

    Achromatic colors (low saturation) are bucketed by brightness.
    Chromatic colors go through a fixed decision table keyed on the
    dominant channel; ratios are relative to the dominant channel value.
    """

    # Red-dominant rules
    RED_RULES = {
        "yellow_green_ratio": 0.8,  # green close to red -> yellow/olive
        "yellow_blue_ratio": 0.5,
        "orange_green_ratio": 0.4,  # medium green -> orange/brown
        "orange_blue_ratio": 0.4,
        "brown_max_red": 180,
        "purple_blue_ratio": 0.6,  # strong blue, weak green, dark -> purple
        "purple_green_ratio": 0.5,
        "purple_max_brightness": 110,
        "pink_blue_ratio": 0.5,  # strong blue or light -> pink
        "pink_green_ratio": 0.6,
    }

    # Green-dominant rules
    GREEN_RULES = {
        "teal_blue_ratio": 0.8,
        "yellow_red_ratio": 0.8,
    }

    # Blue-dominant rules
    BLUE_RULES = {
        "purple_red_ratio": 0.5,
        "purple_green_ratio": 0.6,
        "teal_green_ratio": 0.8,
        "teal_red_ratio": 0.5,
        "navy_green_ratio": 0.5,
        "navy_max_brightness": 80,
    }

    OLIVE_MAX_BRIGHTNESS = 100

    def __init__(
        self,
        achromatic_saturation: Optional[int] = None,
        brightness_black: Optional[int] = None,
        brightness_gray: Optional[int] = None,
        brightness_light_gray: Optional[int] = None,
        search_url: Optional[str] = None
    ):
        """
        Initialize shopping query builder. Unset values come from settings.

        Args:
            achromatic_saturation: Saturation below which colors are achromatic
            brightness_black: Brightness below which achromatic is black
            brightness_gray: Brightness below which achromatic is gray
            brightness_light_gray: Brightness below which achromatic is light gray
            search_url: Retail search URL template with a {query} placeholder
        """
        self.achromatic_saturation = (
            settings.ACHROMATIC_SATURATION if achromatic_saturation is None else achromatic_saturation
        )
        self.brightness_black = (
            settings.BRIGHTNESS_BLACK if brightness_black is None else brightness_black
        )
        self.brightness_gray = (
            settings.BRIGHTNESS_GRAY if brightness_gray is None else brightness_gray
        )
        self.brightness_light_gray = (
            settings.BRIGHTNESS_LIGHT_GRAY if brightness_light_gray is None else brightness_light_gray
        )
        self.search_url = search_url or settings.SHOPPING_SEARCH_URL

    def coarse_color(self, r: int, g: int, b: int) -> str:
        """
        Classify an RGB color into a coarse color name.

        Args:
            r, g, b: Channel values 0-255

        Returns:
            One of COARSE_COLORS
        """
        brightness = (r + g + b) / 3
        saturation = max(r, g, b) - min(r, g, b)

        if saturation < self.achromatic_saturation:
            if brightness < self.brightness_black:
                return "black"
            if brightness < self.brightness_gray:
                return "gray"
            if brightness < self.brightness_light_gray:
                return "light gray"
            return "white"

        if r >= g and r >= b:
            return self._classify_red(r, g, b, brightness)
        if g >= b:
            return self._classify_green(r, g, b, brightness)
        return self._classify_blue(r, g, b, brightness)

    def _classify_red(self, r: int, g: int, b: int, brightness: float) -> str:
        rules = self.RED_RULES

        if g >= rules["yellow_green_ratio"] * r and b < rules["yellow_blue_ratio"] * r:
            return "olive" if brightness < self.OLIVE_MAX_BRIGHTNESS else "yellow"

        if g >= rules["orange_green_ratio"] * r and b < rules["orange_blue_ratio"] * r:
            return "brown" if r < rules["brown_max_red"] else "orange"

        if (b >= rules["purple_blue_ratio"] * r
                and g < rules["purple_green_ratio"] * r
                and brightness < rules["purple_max_brightness"]):
            return "purple"

        if b >= rules["pink_blue_ratio"] * r or g >= rules["pink_green_ratio"] * r:
            return "pink"

        return "red"

    def _classify_green(self, r: int, g: int, b: int, brightness: float) -> str:
        rules = self.GREEN_RULES

        if b >= rules["teal_blue_ratio"] * g:
            return "teal"

        if r >= rules["yellow_red_ratio"] * g:
            return "olive" if brightness < self.OLIVE_MAX_BRIGHTNESS else "yellow"

        return "green"

    def _classify_blue(self, r: int, g: int, b: int, brightness: float) -> str:
        rules = self.BLUE_RULES

        if r >= rules["purple_red_ratio"] * b and g < rules["purple_green_ratio"] * b:
            return "purple"

        if g >= rules["teal_green_ratio"] * b and r < rules["teal_red_ratio"] * b:
            return "teal"

        if g < rules["navy_green_ratio"] * b and brightness < rules["navy_max_brightness"]:
            return "navy"

        return "blue"

    def build_query(self, rgb: Tuple[int, int, int], refined_label: str) -> str:
        """
        Build the retail search string.

        Args:
            rgb: Garment color (r, g, b)
            refined_label: Refined garment label

        Returns:
            "<coarse color> <refined label>"
        """
        color = self.coarse_color(*rgb)
        return f"{color} {refined_label.strip()}"

    def build_link(self, rgb: Tuple[int, int, int], refined_label: str) -> Dict[str, str]:
        """
        Build a retail search link.

        Returns:
            {"title": "navy jeans", "url": "https://...q=navy+jeans"}
        """
        query = self.build_query(rgb, refined_label)
        url = self.search_url.format(query=quote_plus(query))
        logger.debug(f"Shopping link for '{query}': {url}")
        return {"title": query, "url": url}


def create_shopping_query_builder() -> ShoppingQueryBuilder:
    """
    Factory function to create shopping query builder.

    Returns:
        ShoppingQueryBuilder instance
    """
    return ShoppingQueryBuilder()
