import asyncio
import json
from unittest.mock import patch

import httpx
import pytest

from app.core.config import settings
from app.core.errors import UpstreamError, ServiceUnavailable
from app.services.gemini_client import GeminiClient


@pytest.fixture
def use_transport():
    def _use(handler):
        GeminiClient.transport = httpx.MockTransport(handler)

    yield _use
    GeminiClient.transport = None


def generate(system_prompt="You are helpful", message="hello"):
    return asyncio.run(GeminiClient.generate(system_prompt, message))


def test_returns_candidate_text(use_transport):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "candidates": [{"content": {"parts": [{"text": "Join the "}, {"text": "Erangel Showdown!"}]}}]
        })

    use_transport(handler)

    assert generate(message="which tournament?") == "Join the Erangel Showdown!"
    assert seen["url"].endswith(f"/{settings.GEMINI_MODEL}:generateContent")
    assert seen["key"] == settings.GEMINI_API_KEY
    parts = seen["body"]["contents"][0]["parts"]
    assert parts[0]["text"] == "You are helpful"
    assert parts[1]["text"] == "User message: which tournament?"


def test_non_200_is_upstream_error(use_transport):
    use_transport(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(UpstreamError) as exc:
        generate()
    assert exc.value.status_code == 502
    assert exc.value.detail == "AI request failed"


def test_no_candidates_is_upstream_error(use_transport):
    use_transport(lambda request: httpx.Response(200, json={"candidates": []}))

    with pytest.raises(UpstreamError):
        generate()


def test_non_json_answer_is_upstream_error(use_transport):
    use_transport(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(UpstreamError):
        generate()


def test_unexpected_json_shape_is_upstream_error(use_transport):
    use_transport(lambda request: httpx.Response(200, json=[{"candidates": []}]))

    with pytest.raises(UpstreamError):
        generate()


def test_non_dict_parts_are_upstream_error(use_transport):
    use_transport(lambda request: httpx.Response(200, json={
        "candidates": [{"content": {"parts": ["plain string"]}}]
    }))

    with pytest.raises(UpstreamError):
        generate()


def test_transport_failure_is_upstream_error(use_transport):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    use_transport(handler)

    with pytest.raises(UpstreamError):
        generate()


def test_missing_api_key():
    with patch.object(settings, "GEMINI_API_KEY", ""):
        with pytest.raises(ServiceUnavailable) as exc:
            generate()
    assert exc.value.status_code == 503
