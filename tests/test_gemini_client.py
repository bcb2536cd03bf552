"""
Tests for request construction and response handling in the Gemini client.
"""

import logging
import threading
from unittest.mock import patch

import pytest
import requests

from backend.errors import GenerationInProgress, NoImageGenerated
from backend.gemini_client import (
    PortraitClient,
    build_parts,
    build_payload,
    extract_image,
    generate_portrait,
)
from backend.prompts import HoodieColor
from tests.helpers import image_response, make_response

SUBJECT = "data:image/jpeg;base64,AAA"
REFERENCE = "data:image/png;base64,BBB"


@pytest.fixture
def mock_post():
    with patch("backend.gemini_client.requests.post") as mock:
        yield mock


class TestBuildParts:

    def test_subject_only(self):
        parts = build_parts(SUBJECT, None, "prompt")
        assert parts == [
            {"inlineData": {"mimeType": "image/jpeg", "data": "AAA"}},
            {"text": "prompt"},
        ]

    def test_subject_then_reference_then_text(self):
        parts = build_parts(SUBJECT, REFERENCE, "prompt")
        assert [p.get("inlineData", {}).get("data") for p in parts[:2]] == ["AAA", "BBB"]
        assert parts[1]["inlineData"]["mimeType"] == "image/png"
        assert parts[2] == {"text": "prompt"}
        assert len(parts) == 3

    def test_empty_reference_is_omitted(self):
        assert len(build_parts(SUBJECT, "", "prompt")) == 2

    def test_payload_requests_image_only(self):
        payload = build_payload([{"text": "x"}])
        assert payload["generationConfig"] == {"responseModalities": ["IMAGE"]}
        assert payload["contents"] == [{"role": "user", "parts": [{"text": "x"}]}]


class TestExtractImage:

    def test_wraps_inline_data_as_png(self):
        data = {"candidates": [{"content": {"parts": [{"inlineData": {"data": "XYZ"}}]}}]}
        assert extract_image(data) == "data:image/png;base64,XYZ"

    def test_output_mime_is_fixed(self):
        data = {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "image/jpeg", "data": "XYZ"}}]}}]}
        assert extract_image(data) == "data:image/png;base64,XYZ"

    @pytest.mark.parametrize("data", [
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": "sorry, I can't do that"}]}}]},
        [],
        None,
        [{"error": "x"}],
        {"candidates": ["x"]},
        {"candidates": [{"content": ["x"]}]},
        {"candidates": [{"content": {"parts": ["x"]}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": "XYZ"}]}}]},
    ])
    def test_no_image(self, data):
        with pytest.raises(NoImageGenerated, match="No image generated"):
            extract_image(data)

    def test_only_first_part_is_consulted(self):
        data = {"candidates": [{"content": {"parts": [{"text": "here you go"}, {"inlineData": {"data": "XYZ"}}]}}]}
        with pytest.raises(NoImageGenerated):
            extract_image(data)


class TestPortraitClient:

    def test_end_to_end(self, mock_post):
        mock_post.return_value = image_response("CCC")
        client = PortraitClient("test-key", endpoint="https://example.test/generate", timeout=None)

        result = client.generate(SUBJECT, REFERENCE, HoodieColor.BLACK, "brighter lighting")

        assert result == "data:image/png;base64,CCC"
        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == "https://example.test/generate"
        assert kwargs["headers"]["X-goog-api-key"] == "test-key"
        assert kwargs["timeout"] is None
        parts = kwargs["json"]["contents"][0]["parts"]
        assert parts[0] == {"inlineData": {"mimeType": "image/jpeg", "data": "AAA"}}
        assert parts[1] == {"inlineData": {"mimeType": "image/png", "data": "BBB"}}
        assert "black hoodie" in parts[2]["text"]
        assert '"SKODA" with "GCC"' in parts[2]["text"]
        assert parts[2]["text"].endswith("brighter lighting")

    def test_no_image_raises(self, mock_post):
        mock_post.return_value = make_response({"candidates": [{"content": {"parts": [{"text": "no"}]}}]})
        with pytest.raises(NoImageGenerated):
            PortraitClient("k").generate(SUBJECT, None, HoodieColor.GREEN)
        assert mock_post.call_count == 1

    def test_non_object_body_logged_as_no_image(self, mock_post, caplog):
        mock_post.return_value = make_response([{"error": "x"}])
        with caplog.at_level(logging.ERROR, logger="hoodie_portrait_studio.client"):
            with pytest.raises(NoImageGenerated):
                PortraitClient("k").generate(SUBJECT, None, HoodieColor.GREEN)
        assert "No image returned from model" in caplog.text

    def test_http_error_reraised_unchanged(self, mock_post):
        resp = make_response(status_code=403, text="PERMISSION_DENIED")
        mock_post.return_value = resp
        with pytest.raises(requests.HTTPError) as exc_info:
            PortraitClient("bad").generate(SUBJECT, None, HoodieColor.GREEN)
        assert exc_info.value.response is resp
        assert mock_post.call_count == 1

    def test_transport_error_not_retried(self, mock_post):
        err = requests.ConnectionError("boom")
        mock_post.side_effect = err
        client = PortraitClient("k")
        with pytest.raises(requests.ConnectionError) as exc_info:
            client.generate(SUBJECT, None, HoodieColor.GREEN)
        assert exc_info.value is err
        assert mock_post.call_count == 1
        assert not client.busy

    def test_overlapping_call_rejected(self, mock_post):
        started = threading.Event()
        release = threading.Event()

        def slow_post(*args, **kwargs):
            started.set()
            release.wait(5)
            return image_response("CCC")

        mock_post.side_effect = slow_post
        client = PortraitClient("k")
        results = []
        worker = threading.Thread(
            target=lambda: results.append(client.generate(SUBJECT, None, HoodieColor.GREEN))
        )
        worker.start()
        assert started.wait(5)
        try:
            assert client.busy
            with pytest.raises(GenerationInProgress):
                client.generate(SUBJECT, None, HoodieColor.GREEN)
        finally:
            release.set()
            worker.join(5)
        assert results == ["data:image/png;base64,CCC"]
        assert not client.busy
        assert mock_post.call_count == 1

    def test_generate_portrait_helper(self, mock_post):
        mock_post.return_value = image_response("XYZ")
        assert generate_portrait("k", SUBJECT, None, HoodieColor.WHITE, "") == "data:image/png;base64,XYZ"
