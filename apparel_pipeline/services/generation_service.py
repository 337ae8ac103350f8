"""
Image generation adapter using Vertex AI Imagen.

Generated templates depict the garment in a neutral reference color on a
white background; the final color is applied afterwards by color transfer.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Optional

import vertexai
from google.api_core import exceptions as google_exceptions
from vertexai.preview.vision_models import ImageGenerationModel

from apparel_pipeline.core.config import settings
from apparel_pipeline.core.exceptions import ExternalServiceFailure

logger = logging.getLogger(__name__)


class ImagenGenerator:
    """Vertex AI Imagen text-to-image adapter."""

    SERVICE_NAME = "imagen"

    def __init__(
        self,
        model: Optional[Any] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize Imagen generator.

        Args:
            model: Preloaded ImageGenerationModel (loaded from settings if None)
            timeout: Per-call timeout in seconds (defaults to settings)
        """
        if model is None:
            vertexai.init(
                project=settings.GOOGLE_CLOUD_PROJECT or None,
                location=settings.GOOGLE_CLOUD_LOCATION
            )
            logger.info(f"Loading Imagen model: {settings.IMAGEN_MODEL}")
            model = ImageGenerationModel.from_pretrained(settings.IMAGEN_MODEL)
        self.model = model
        self.timeout = settings.SERVICE_TIMEOUT_SECONDS if timeout is None else timeout

    def _generate(self, prompt: str) -> bytes:
        response = self.model.generate_images(prompt=prompt, number_of_images=1)
        images = list(response.images)
        if not images:
            raise ExternalServiceFailure(self.SERVICE_NAME, "generate", "no image returned")
        return images[0]._image_bytes

    def generate(self, prompt: str) -> bytes:
        """
        Generate an image for a prompt.

        Raises:
            ExternalServiceFailure: On API error, empty result or timeout
        """
        logger.info(f"Generating template image: '{prompt}'")
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._generate, prompt)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            logger.error(f"❌ Imagen generation timed out after {self.timeout}s")
            raise ExternalServiceFailure(
                self.SERVICE_NAME, "generate", f"timed out after {self.timeout}s"
            ) from e
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"❌ Imagen generation failed: {e}")
            raise ExternalServiceFailure(self.SERVICE_NAME, "generate", str(e)) from e
        finally:
            # An abandoned call is left to finish in the background
            executor.shutdown(wait=False)
