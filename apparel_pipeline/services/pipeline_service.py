"""
Apparel Pipeline Service

Runs one request end to end:

1. Detect objects in the photo
2. Keep apparel detections, deduplicated by label
3. Per candidate (in parallel): crop, refine label, extract color
4. Match the user query against the candidates
5. Generate a neutral-color template for the matched garment
6. Shift the template toward the garment's real color
7. Build the same-color shopping query

All request state lives in a PipelineContext; the pipeline object itself
holds only injected providers and configuration, so one instance can
serve concurrent requests.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from apparel_pipeline.core.config import settings
from apparel_pipeline.core.exceptions import NoApparelDetected, NoMatchFound
from apparel_pipeline.cv.apparel_filter import ApparelFilter, create_apparel_filter
from apparel_pipeline.cv.color_extractor import ColorExtractor, PaletteColorNamer
from apparel_pipeline.cv.color_transfer import ColorTransferRecolorer, create_recolorer
from apparel_pipeline.cv.label_refiner import LabelRefiner
from apparel_pipeline.cv.matcher import ApparelCandidate, Matcher, create_matcher
from apparel_pipeline.cv.region_extractor import RegionExtractor, create_region_extractor, decode_image
from apparel_pipeline.cv.shopping_query import ShoppingQueryBuilder, create_shopping_query_builder
from apparel_pipeline.schemas.detection import Detection
from apparel_pipeline.services.providers import (
    ColorNamer,
    ColorService,
    ImageGenerator,
    LabelService,
    ObjectDetector,
)

logger = logging.getLogger(__name__)


def build_template_prompt(label: str, template: Optional[str] = None) -> str:
    """
    Build the neutral-color generation prompt for a garment label.

    Args:
        label: Refined garment label
        template: Prompt template with a {label} placeholder

    Returns:
        Prompt text
    """
    return (template or settings.TEMPLATE_PROMPT).format(label=label.strip())


@dataclass
class PipelineContext:
    """Request-scoped state threaded through every stage."""
    image_bytes: bytes
    query: str
    detections: List[Detection] = field(default_factory=list)
    candidates: List[ApparelCandidate] = field(default_factory=list)
    timings_ms: Dict[str, float] = field(default_factory=dict)

    def record(self, stage: str, started: float) -> None:
        self.timings_ms[stage] = (time.perf_counter() - started) * 1000


@dataclass
class PipelineResult:
    """Outcome of one successful pipeline run."""
    candidate: ApparelCandidate
    match_score: int
    template_image: bytes
    recolored_image: bytes
    shopping_query: str
    shopping_url: str
    available_labels: List[str]
    timings_ms: Dict[str, float]

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization (image bytes excluded)."""
        return {
            "raw_label": self.candidate.raw_label,
            "refined_label": self.candidate.refined_label,
            "color": {
                "r": self.candidate.color.r,
                "g": self.candidate.color.g,
                "b": self.candidate.color.b,
                "hex": self.candidate.color.hex,
                "color_name": self.candidate.color.color_name
            },
            "match_score": self.match_score,
            "shopping": {
                "title": self.shopping_query,
                "url": self.shopping_url
            },
            "available_labels": self.available_labels,
            "timings_ms": self.timings_ms
        }


class ApparelPipeline:
    """
    Detection, matching and color-transfer pipeline.

    Providers are injected: detector, label service, color service and
    image generator each satisfy the protocols in services.providers.
    """

    def __init__(
        self,
        detector: ObjectDetector,
        label_service: LabelService,
        color_service: ColorService,
        generator: ImageGenerator,
        color_namer: Optional[ColorNamer] = None,
        apparel_filter: Optional[ApparelFilter] = None,
        region_extractor: Optional[RegionExtractor] = None,
        matcher: Optional[Matcher] = None,
        recolorer: Optional[ColorTransferRecolorer] = None,
        shopping_builder: Optional[ShoppingQueryBuilder] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize pipeline.

        Args:
            detector: ObjectDetector provider
            label_service: LabelService provider
            color_service: ColorService provider
            generator: ImageGenerator provider
            color_namer: ColorNamer provider (PaletteColorNamer if None)
            apparel_filter: ApparelFilter (creates default if None)
            region_extractor: RegionExtractor (creates default if None)
            matcher: Matcher (creates default if None)
            recolorer: ColorTransferRecolorer (creates default if None)
            shopping_builder: ShoppingQueryBuilder (creates default if None)
            max_workers: Per-request candidate worker threads
        """
        self.detector = detector
        self.generator = generator
        self.label_refiner = LabelRefiner(label_service)
        self.color_extractor = ColorExtractor(color_service, color_namer or PaletteColorNamer())
        self.apparel_filter = apparel_filter or create_apparel_filter()
        self.region_extractor = region_extractor or create_region_extractor()
        self.matcher = matcher or create_matcher()
        self.recolorer = recolorer or create_recolorer()
        self.shopping_builder = shopping_builder or create_shopping_query_builder()
        self.max_workers = max_workers or settings.MAX_CANDIDATE_WORKERS

    def build_candidate(self, image: np.ndarray, detection: Detection) -> ApparelCandidate:
        """
        Crop, label and color one detection.

        Raises:
            InvalidRegion: If the detection's box is degenerate
            ExternalServiceFailure: If labeling or color extraction fails
        """
        region = self.region_extractor.extract(image, detection)
        crop_bytes = region.to_bytes()

        refined_label = self.label_refiner.refine(crop_bytes, detection.raw_label)
        color = self.color_extractor.extract(crop_bytes)

        return ApparelCandidate(
            raw_label=detection.raw_label,
            cropped_pixels=region.pixels,
            refined_label=refined_label,
            color=color
        )

    def collect_candidates(self, context: PipelineContext) -> List[ApparelCandidate]:
        """
        Detect, filter and enrich candidates for a request.

        Raises:
            NoApparelDetected: If no apparel detection survives filtering
        """
        started = time.perf_counter()
        context.detections = self.detector.detect(context.image_bytes)
        context.record("detect", started)

        seeds = self.apparel_filter.filter(context.detections)
        if not seeds:
            logger.warning(
                f"No apparel among {len(context.detections)} detections: "
                f"{[d.raw_label for d in context.detections]}"
            )
            raise NoApparelDetected()

        started = time.perf_counter()
        image = decode_image(context.image_bytes)
        workers = max(1, min(self.max_workers, len(seeds)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order, preserving detector order
            context.candidates = list(
                executor.map(lambda d: self.build_candidate(image, d), seeds)
            )
        context.record("candidates", started)

        logger.info(
            f"Built {len(context.candidates)} candidates: "
            f"{[(c.refined_label, c.color.hex) for c in context.candidates]}"
        )
        return context.candidates

    def run(self, image_bytes: bytes, query: Optional[str] = "") -> PipelineResult:
        """
        Run the full pipeline for one photo and query.

        Args:
            image_bytes: Encoded source photograph
            query: Free-text garment request (empty selects the first garment)

        Returns:
            PipelineResult with recolored image and shopping query

        Raises:
            NoApparelDetected: If the photo holds no apparel
            NoMatchFound: If the query matches no detected garment
            InvalidRegion: If a detection's box is degenerate
            ExternalServiceFailure: If any provider call fails or times out
        """
        context = PipelineContext(image_bytes=image_bytes, query=query or "")
        logger.info(f"Pipeline started: query='{context.query}', {len(image_bytes)} bytes")

        candidates = self.collect_candidates(context)

        match = self.matcher.match(candidates, context.query)
        try:
            candidate = match.unwrap(context.query)
        except NoMatchFound as e:
            logger.warning(f"{e}")
            raise

        started = time.perf_counter()
        prompt = build_template_prompt(candidate.refined_label)
        template = self.generator.generate(prompt)
        context.record("generate", started)

        started = time.perf_counter()
        recolored = self.recolorer.recolor(template, candidate.color.rgb)
        context.record("recolor", started)

        link = self.shopping_builder.build_link(candidate.color.rgb, candidate.refined_label)

        logger.info(
            f"✅ Pipeline finished: '{candidate.refined_label}' {candidate.color.hex}, "
            f"shopping='{link['title']}'"
        )

        return PipelineResult(
            candidate=candidate,
            match_score=match.score,
            template_image=template,
            recolored_image=recolored,
            shopping_query=link["title"],
            shopping_url=link["url"],
            available_labels=match.available_labels,
            timings_ms=context.timings_ms
        )


def create_pipeline(use_vision_colors: bool = True) -> ApparelPipeline:
    """
    Factory function to create the pipeline with Google adapters.

    Args:
        use_vision_colors: Use Vision image properties for colors
                           (False uses the offline OpenCV adapter)

    Returns:
        ApparelPipeline instance
    """
    from apparel_pipeline.services.generation_service import ImagenGenerator
    from apparel_pipeline.services.vision_service import GoogleVisionService, OpenCVColorService

    vision_service = GoogleVisionService()
    color_service = vision_service if use_vision_colors else OpenCVColorService()
    return ApparelPipeline(
        detector=vision_service,
        label_service=vision_service,
        color_service=color_service,
        generator=ImagenGenerator()
    )
