"""
Pipeline error kinds.

Every error is terminal for the request that raised it. Callers decide
whether to retry; nothing in the pipeline retries on its own.
"""
from typing import List, Optional


class ApparelPipelineError(Exception):
    """Base class for all pipeline errors."""


class InvalidRegion(ApparelPipelineError, ValueError):
    """Bounding polygon collapses to an empty crop."""

    def __init__(self, width: int, height: int, label: Optional[str] = None):
        self.width = width
        self.height = height
        self.label = label
        super().__init__(
            f"Invalid region for '{label or 'detection'}': {width}x{height}"
        )


class NoApparelDetected(ApparelPipelineError):
    """No garment-relevant detection survived filtering."""

    def __init__(self, message: str = "No apparel detected in image"):
        super().__init__(message)


class NoMatchFound(ApparelPipelineError):
    """Query scored zero against every candidate."""

    def __init__(self, query: str, available_labels: List[str]):
        self.query = query
        self.available_labels = list(available_labels)
        options = ", ".join(self.available_labels) or "nothing"
        super().__init__(
            f"No apparel matching '{query}' was found. Did you mean one of: {options}?"
        )


class ExternalServiceFailure(ApparelPipelineError):
    """A detector, labeler, color or generator call failed or timed out."""

    def __init__(self, service: str, operation: str, detail: str):
        self.service = service
        self.operation = operation
        self.detail = detail
        super().__init__(f"{service}.{operation} failed: {detail}")
