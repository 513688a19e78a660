"""OpenRouter chat-completion and model-catalog client."""

from __future__ import annotations

import logging

import httpx

from sahulat.errors import ConfigurationError, MalformedResponseError, UpstreamTransportError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_TIMEOUT = 60.0
CATALOG_TIMEOUT = 10.0


def _headers(api_key: str | None, referer: str | None = None, title: str | None = None) -> dict:
    if not api_key:
        raise ConfigurationError("OPENROUTER_API_KEY is not configured")
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    if referer:
        headers["HTTP-Referer"] = referer
    if title:
        headers["X-Title"] = title
    return headers


def fetch_available_models(
    api_key: str | None,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = CATALOG_TIMEOUT,
) -> set[str]:
    """Return the set of model identifiers the provider currently serves.

    Raises:
        ConfigurationError: no API key.
        UpstreamTransportError: network failure, timeout or non-2xx status.
    """
    try:
        response = httpx.get(
            f"{base_url.rstrip('/')}/models",
            headers=_headers(api_key),
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException as e:
        raise UpstreamTransportError("Model catalog request timed out") from e
    except httpx.HTTPStatusError as e:
        raise UpstreamTransportError(
            f"Model catalog HTTP error {e.response.status_code}"
        ) from e
    except (httpx.HTTPError, ValueError) as e:
        raise UpstreamTransportError(f"Model catalog request failed: {e}") from e

    models = {item.get("id") for item in data.get("data") or [] if isinstance(item, dict)}
    models.discard(None)
    logger.debug("Model catalog lists %d models", len(models))
    return models


def call_completion(
    model: str,
    messages: list[dict],
    api_key: str | None,
    temperature: float = 0.3,
    max_tokens: int = 1000,
    json_mode: bool = False,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    referer: str | None = None,
    title: str | None = None,
) -> str:
    """Send one chat-completion request and return the assistant's raw text.

    Raises:
        ConfigurationError: no API key.
        UpstreamTransportError: network failure, timeout or non-2xx status.
        MalformedResponseError: the response carries no message content.
    """
    payload: dict = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    logger.info("Completion request: model=%s, %d messages", model, len(messages))
    try:
        response = httpx.post(
            f"{base_url.rstrip('/')}/chat/completions",
            headers=_headers(api_key, referer, title),
            json=payload,
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException as e:
        raise UpstreamTransportError(f"Completion request to {model} timed out") from e
    except httpx.HTTPStatusError as e:
        raise UpstreamTransportError(
            f"Completion HTTP error {e.response.status_code}: {e.response.text[:200]}"
        ) from e
    except httpx.HTTPError as e:
        raise UpstreamTransportError(f"Completion request failed: {e}") from e
    except ValueError as e:
        raise MalformedResponseError(f"Completion response is not JSON: {e}") from e

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError("No message content in completion response") from e
    if not content:
        raise MalformedResponseError("Empty completion response")
    return content
