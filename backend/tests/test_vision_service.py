"""
Favorite Places AI Backend - Image Signal Extraction Tests (Mocked)
====================================================================

What we test:
    ✅ Annotation response is normalized with caps (10 / 5 / top 3 colors)
    ✅ Color scores become rounded percentage strings
    ✅ Any client failure or per-image error returns None (never raises)
    ✅ build_signal_extractor() degrades to the no-op extractor
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from places_ai.services.vision_service import (
    CloudVisionSignalExtractor,
    NoImageSignalExtractor,
    build_signal_extractor,
    format_color_share,
    signal_from_annotations,
)


def _annotation_response(labels=(), landmarks=(), scores=(), error_message=""):
    return SimpleNamespace(
        label_annotations=[SimpleNamespace(description=d) for d in labels],
        landmark_annotations=[SimpleNamespace(description=d) for d in landmarks],
        image_properties_annotation=SimpleNamespace(
            dominant_colors=SimpleNamespace(
                colors=[SimpleNamespace(score=s) for s in scores],
            ),
        ),
        error=SimpleNamespace(message=error_message),
    )


class TestSignalFromAnnotations:

    def test_caps_and_ordering(self):
        response = _annotation_response(
            labels=[f"label-{i}" for i in range(15)],
            landmarks=[f"landmark-{i}" for i in range(8)],
            scores=[0.05, 0.42, 0.2, 0.3],
        )
        signal = signal_from_annotations(response)

        assert signal.labels == [f"label-{i}" for i in range(10)]
        assert signal.landmarks == [f"landmark-{i}" for i in range(5)]
        assert signal.dominant_color_shares == ["42%", "30%", "20%"]

    def test_empty_response_gives_empty_signal(self):
        signal = signal_from_annotations(_annotation_response())
        assert signal.labels == []
        assert signal.landmarks == []
        assert signal.dominant_color_shares == []

    @pytest.mark.parametrize("score, expected", [
        (0.4567, "46%"),
        (0.004, "0%"),
        (1.0, "100%"),
    ])
    def test_format_color_share(self, score, expected):
        assert format_color_share(score) == expected


class TestCloudVisionSignalExtractor:

    @pytest.mark.asyncio
    async def test_extract_success(self):
        client = MagicMock()
        client.annotate_image.return_value = _annotation_response(
            labels=["Beach"], landmarks=["Bondi Beach"], scores=[0.6],
        )
        extractor = CloudVisionSignalExtractor(client=client)

        signal = await extractor.extract("https://img/beach.jpg")

        assert signal.labels == ["Beach"]
        assert signal.landmarks == ["Bondi Beach"]
        assert signal.dominant_color_shares == ["60%"]
        request = client.annotate_image.call_args.args[0]
        assert request["image"]["source"]["image_uri"] == "https://img/beach.jpg"
        assert len(request["features"]) == 3

    @pytest.mark.asyncio
    async def test_client_exception_returns_none(self):
        client = MagicMock()
        client.annotate_image.side_effect = ConnectionError("network down")
        extractor = CloudVisionSignalExtractor(client=client)

        assert await extractor.extract("https://img/beach.jpg") is None

    @pytest.mark.asyncio
    async def test_per_image_error_returns_none(self):
        client = MagicMock()
        client.annotate_image.return_value = _annotation_response(
            error_message="We can not access the URL currently.",
        )
        extractor = CloudVisionSignalExtractor(client=client)

        assert await extractor.extract("not-a-url") is None


class TestBuildSignalExtractor:

    def test_disabled_by_configuration(self):
        with patch("places_ai.services.vision_service.settings") as mock_settings:
            mock_settings.vision_enabled = False
            extractor = build_signal_extractor()

        assert isinstance(extractor, NoImageSignalExtractor)
        assert extractor.enabled is False

    def test_client_construction_failure_degrades(self):
        with patch("places_ai.services.vision_service.settings") as mock_settings, \
             patch("places_ai.services.vision_service.vision") as mock_vision:
            mock_settings.vision_enabled = True
            mock_vision.ImageAnnotatorClient.side_effect = Exception(
                "Your default credentials were not found"
            )
            extractor = build_signal_extractor()

        assert isinstance(extractor, NoImageSignalExtractor)

    def test_enabled_and_configured(self):
        with patch("places_ai.services.vision_service.settings") as mock_settings, \
             patch("places_ai.services.vision_service.vision"):
            mock_settings.vision_enabled = True
            extractor = build_signal_extractor()

        assert isinstance(extractor, CloudVisionSignalExtractor)
        assert extractor.enabled is True

    @pytest.mark.asyncio
    async def test_no_op_extractor_always_absent(self):
        assert await NoImageSignalExtractor().extract("https://img/1.jpg") is None
