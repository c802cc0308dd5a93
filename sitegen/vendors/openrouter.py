"""Client utilities for the OpenRouter chat completions API."""

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_REFERER = "https://foundlio.com"
_TITLE = "Foundlio Generator"


class OpenRouterError(RuntimeError):
    """Raised when the completions API returns a non-successful response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def chat_completion(
    prompt: str,
    *,
    api_key: str,
    model: str,
    api_url: str,
    max_tokens: int,
    temperature: Optional[float] = None,
    timeout: int = 60,
) -> str:
    """Send a single-message chat completion and return the assistant text."""
    body: Dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": max_tokens,
    }
    if temperature is not None:
        body["temperature"] = temperature

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": _REFERER,
        "X-Title": _TITLE,
    }
    response = _SESSION.post(api_url, json=body, headers=headers, timeout=timeout)
    if not 200 <= response.status_code < 300:
        logger.error("chat_completion failed: status=%s body=%s", response.status_code, response.text[:500])
        raise OpenRouterError(f"OpenRouter API error: {response.status_code}", status_code=response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        raise OpenRouterError("OpenRouter returned a non-JSON body") from exc

    if not isinstance(payload, dict):
        raise OpenRouterError("Malformed response envelope from OpenRouter")
    choices = payload.get("choices") or []
    if not isinstance(choices, list):
        raise OpenRouterError("Malformed response envelope from OpenRouter")
    if not choices:
        raise OpenRouterError("Invalid response from OpenRouter API: no choices")
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise OpenRouterError("Malformed response envelope from OpenRouter")
    content = message.get("content")
    return content if isinstance(content, str) else ""
