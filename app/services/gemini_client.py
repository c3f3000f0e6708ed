import httpx
import logging
from typing import Optional

from app.core.config import settings
from app.core.errors import UpstreamError, ServiceUnavailable

logger = logging.getLogger(__name__)


class GeminiClient:
    """Gemini generateContent over REST; one attempt, no retry"""

    # Tests swap in an httpx.MockTransport
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def _endpoint(cls) -> str:
        return f"{settings.GEMINI_API_URL}/{settings.GEMINI_MODEL}:generateContent"

    @classmethod
    def _get_headers(cls) -> dict:
        return {
            "x-goog-api-key": settings.GEMINI_API_KEY,
            "Content-Type": "application/json",
        }

    @classmethod
    async def generate(cls, system_prompt: str, user_message: str) -> str:
        """
        Ask the model for a reply.

        Args:
            system_prompt: instructions plus the live tournament snapshot
            user_message: the user's text, sent verbatim

        Returns:
            The reply text.

        Raises:
            ServiceUnavailable: GEMINI_API_KEY is not set
            UpstreamError: transport failure, non-200 status or empty answer
        """
        if not settings.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY is not set!")
            raise ServiceUnavailable("AI assistant is not configured")

        payload = {
            "contents": [
                {
                    "parts": [
                        {"text": system_prompt},
                        {"text": f"User message: {user_message}"},
                    ]
                }
            ],
            "generationConfig": {
                "temperature": settings.GEMINI_TEMPERATURE,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": settings.GEMINI_MAX_OUTPUT_TOKENS,
            },
        }

        try:
            async with httpx.AsyncClient(
                timeout=settings.GEMINI_TIMEOUT_SECONDS,
                transport=cls.transport,
            ) as client:
                response = await client.post(
                    cls._endpoint(),
                    json=payload,
                    headers=cls._get_headers(),
                )
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e!r}")
            raise UpstreamError()

        if response.status_code != 200:
            logger.error(f"Gemini API error {response.status_code}: {response.text[:500]}")
            raise UpstreamError()

        try:
            data = response.json()
            candidates = data.get("candidates") or []
            if not candidates:
                logger.error(f"Gemini returned no candidates: {data}")
                raise UpstreamError()

            parts = (candidates[0].get("content") or {}).get("parts") or []
            text = "".join(part.get("text", "") for part in parts)
        except (ValueError, AttributeError, TypeError) as e:
            logger.error(f"Gemini returned a malformed answer: {e!r}")
            raise UpstreamError() from e

        if not text:
            logger.error("Gemini returned an empty answer")
            raise UpstreamError()

        return text
