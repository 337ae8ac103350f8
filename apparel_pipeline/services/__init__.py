"""
Pipeline orchestration and external provider adapters.
"""
from apparel_pipeline.services.pipeline_service import (
    ApparelPipeline,
    PipelineContext,
    PipelineResult,
    create_pipeline,
)

__all__ = [
    "ApparelPipeline",
    "PipelineContext",
    "PipelineResult",
    "create_pipeline",
]
