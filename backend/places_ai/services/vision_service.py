"""
Favorite Places AI Backend - Image Signal Extraction (Google Cloud Vision)
===========================================================================

What:  Turns a photo URL into a compact ImageSignal (labels, landmarks,
       dominant color shares) for the tag-suggestion prompt.
How:   One Cloud Vision annotate call per photo, with fixed caps:
       10 labels, 5 landmarks, top 3 colors by score.
Who:   AIService.suggest_tags(); built once by build_signal_extractor().

Degrade-to-none:
    Image enrichment is optional. Every failure (bad URL, network, quota,
    per-image error in the response) is logged and returns None. When Vision
    is disabled or its client cannot be created at startup, the no-op
    extractor is used instead, so the orchestrator never branches on
    configuration: it only ever sees "signal" or "no signal".
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from google.cloud import vision

from places_ai.config import settings
from places_ai.schemas.ai import ImageSignal

logger = logging.getLogger(__name__)

MAX_LABELS = 10
MAX_LANDMARKS = 5
MAX_COLORS = 3


class ImageSignalExtractor(ABC):
    """Single capability: photo URL in, ImageSignal or None out. Never raises."""

    @abstractmethod
    async def extract(self, photo_url: str) -> Optional[ImageSignal]:
        ...

    @property
    def enabled(self) -> bool:
        return True


class NoImageSignalExtractor(ImageSignalExtractor):
    """Used when Vision is unavailable; always reports "no signal"."""

    async def extract(self, photo_url: str) -> Optional[ImageSignal]:
        return None

    @property
    def enabled(self) -> bool:
        return False


class CloudVisionSignalExtractor(ImageSignalExtractor):
    """Google Cloud Vision implementation."""

    FEATURES = [
        {"type_": vision.Feature.Type.LABEL_DETECTION, "max_results": MAX_LABELS},
        {"type_": vision.Feature.Type.LANDMARK_DETECTION, "max_results": MAX_LANDMARKS},
        {"type_": vision.Feature.Type.IMAGE_PROPERTIES},
    ]

    def __init__(self, client: Optional[Any] = None):
        self.client = client or vision.ImageAnnotatorClient()

    async def extract(self, photo_url: str) -> Optional[ImageSignal]:
        request = {
            "image": {"source": {"image_uri": photo_url}},
            "features": self.FEATURES,
        }
        try:
            # The helper client is synchronous; keep the event loop free
            response = await asyncio.to_thread(self.client.annotate_image, request)
            if response.error.message:
                raise RuntimeError(response.error.message)
            signal = signal_from_annotations(response)
        except Exception as e:
            logger.warning(
                "Vision annotation failed, continuing without image signal: %s",
                str(e),
            )
            return None

        logger.debug(
            "Vision signal: %d labels, %d landmarks, %d colors",
            len(signal.labels),
            len(signal.landmarks),
            len(signal.dominant_color_shares),
        )
        return signal


def signal_from_annotations(response: Any) -> ImageSignal:
    """Normalizes an AnnotateImageResponse into an ImageSignal, applying the caps."""
    labels = [a.description for a in response.label_annotations][:MAX_LABELS]
    landmarks = [a.description for a in response.landmark_annotations][:MAX_LANDMARKS]

    colors = list(response.image_properties_annotation.dominant_colors.colors)
    colors.sort(key=lambda c: c.score, reverse=True)
    shares = [format_color_share(c.score) for c in colors[:MAX_COLORS]]

    return ImageSignal(labels=labels, landmarks=landmarks, dominant_color_shares=shares)


def format_color_share(score: float) -> str:
    """0.4567 → '46%'"""
    return f"{int(score * 100 + 0.5)}%"


def build_signal_extractor() -> ImageSignalExtractor:
    """
    Picks the extractor once at startup.

    Client construction resolves Application Default Credentials; when that
    fails the service keeps running without image enrichment.
    """
    if not settings.vision_enabled:
        logger.info("Google Cloud Vision disabled by configuration")
        return NoImageSignalExtractor()

    try:
        extractor = CloudVisionSignalExtractor()
    except Exception as e:
        logger.warning("Google Cloud Vision not configured (optional feature): %s", str(e))
        return NoImageSignalExtractor()

    logger.info("Google Cloud Vision initialized")
    return extractor
