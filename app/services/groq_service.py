import logging
from typing import Any, Dict, Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


def _extract_text_from_completion(raw: Any) -> str:
    """Pull the assistant text out of an OpenAI-style chat completion.

    Returns an empty string for any shape that does not carry text, so callers
    only need to test for blank output.
    """
    if not isinstance(raw, dict):
        return ""
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, str):
        return content
    # legacy completions shape
    text = first.get("text")
    return text if isinstance(text, str) else ""


async def send_message(
    prompt: str,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
) -> Dict[str, Any]:
    """Send a single user prompt to Groq (or return a mock when DEBUG_MOCK_GROQ).

    Returns:
        {"model": ..., "response": <text>, "raw": <decoded JSON>}

    Raises:
        RuntimeError: no API key, or the API could not be reached or answered with an error
    """
    model = model or settings.GROQ_MODEL
    temperature = settings.GROQ_TEMPERATURE if temperature is None else temperature

    if settings.DEBUG_MOCK_GROQ:
        logger.debug("Using mock Groq response")
        return {
            "model": model,
            "response": f"(mock) Draft for: {prompt[:200]}",
            "raw": {"mock": True},
        }

    if not settings.GROQ_API_KEY:
        logger.error("GROQ_API_KEY is not set; cannot reach Groq")
        raise RuntimeError("GROQ_API_KEY not configured")

    headers = {
        "Authorization": f"Bearer {settings.GROQ_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature,
    }

    logger.debug("Sending prompt to Groq endpoint: %s", settings.GROQ_API_URL)

    async with httpx.AsyncClient(timeout=settings.GROQ_TIMEOUT_SECONDS) as client:
        try:
            r = await client.post(settings.GROQ_API_URL, json=payload, headers=headers)
            r.raise_for_status()
            raw = r.json()
        except httpx.HTTPStatusError as e:
            logger.error("Groq API HTTP Error: %s - Response: %s", e, e.response.text)
            raise RuntimeError(
                f"Groq API Error: {e.response.status_code} - {e.response.text}"
            ) from e
        except Exception as e:
            logger.error("Groq API General Error: %s", e)
            raise RuntimeError(f"Failed to call Groq API: {e}") from e

    return {"model": model, "response": _extract_text_from_completion(raw), "raw": raw}


async def generate_text(prompt: str) -> str:
    """Convenience wrapper returning only the stripped completion text"""
    result = await send_message(prompt)
    return (result.get("response") or "").strip()
