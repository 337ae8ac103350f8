"""
Computer Vision Pipeline

This package contains the per-request apparel stages:
- Region cropping from normalized bounding polygons
- Apparel filtering and label refinement
- Dominant color extraction and naming
- Query matching with tiered scoring
- Color transfer onto generated templates
- Coarse color shopping queries
"""

from apparel_pipeline.cv.region_extractor import RegionExtractor, CroppedRegion, create_region_extractor
from apparel_pipeline.cv.apparel_filter import ApparelFilter, create_apparel_filter
from apparel_pipeline.cv.label_refiner import LabelRefiner
from apparel_pipeline.cv.color_extractor import ColorExtractor, ColorDescriptor, PaletteColorNamer
from apparel_pipeline.cv.matcher import Matcher, ApparelCandidate, MatchResult, create_matcher
from apparel_pipeline.cv.color_transfer import ColorTransferRecolorer, create_recolorer
from apparel_pipeline.cv.shopping_query import ShoppingQueryBuilder, create_shopping_query_builder

__all__ = [
    "RegionExtractor",
    "CroppedRegion",
    "create_region_extractor",
    "ApparelFilter",
    "create_apparel_filter",
    "LabelRefiner",
    "ColorExtractor",
    "ColorDescriptor",
    "PaletteColorNamer",
    "Matcher",
    "ApparelCandidate",
    "MatchResult",
    "create_matcher",
    "ColorTransferRecolorer",
    "create_recolorer",
    "ShoppingQueryBuilder",
    "create_shopping_query_builder",
]
