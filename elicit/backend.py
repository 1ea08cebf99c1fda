"""Generative backend access and response-payload extraction."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Protocol

from google.genai import types

from .config import AppConfig, ModelConfig
from .errors import BackendError, PayloadError
from .logger import LOGGER


class GenerativeBackend(Protocol):
    """Anything that can complete an instruction and return text."""

    def generate(
        self,
        prompt: str,
        *,
        model: str,
        max_output_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        ...


class GeminiBackend:
    """google-genai client with a model fallback chain.

    Each call tries the requested model, then every configured fallback model,
    moving on when a model errors or returns empty text. Raises
    :class:`BackendError` once the chain is exhausted. The client's HTTP
    timeout bounds every attempt.
    """

    def __init__(self, client: Any = None, models: Optional[ModelConfig] = None):
        config = AppConfig.get() if client is None or models is None else None
        self._client = client if client is not None else config.client
        self._models = models if models is not None else config.models

    def generate(
        self,
        prompt: str,
        *,
        model: str,
        max_output_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        chain = self._models.chain_for(model)
        last_error: Optional[Exception] = None

        for candidate in chain:
            try:
                response = self._client.models.generate_content(
                    model=candidate,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        temperature=temperature,
                        max_output_tokens=max_output_tokens,
                    ),
                )
            except Exception as exc:
                LOGGER.warning("Gemini model %s failed: %s", candidate, exc)
                last_error = exc
                continue

            text = (response.text or "").strip()
            if text:
                if candidate != model:
                    LOGGER.info("Gemini fallback model %s answered for %s", candidate, model)
                return text

            LOGGER.warning("Gemini model %s returned empty text", candidate)
            last_error = BackendError(f"{candidate} returned empty text")

        raise BackendError(f"All models failed: {', '.join(chain)}") from last_error


def extract_json_payload(raw: str) -> Dict[str, Any]:
    """
    Parse the JSON object embedded in a model response.

    Steps:
    - Prefer fenced ```json blocks if present
    - Trim to the substring between the first '{' and last '}'
    - Strip control characters (keep \\n, \\t)
    - Try normal parse, then a trailing-comma fix

    Raises:
        PayloadError: nothing parseable, or the payload is not an object.
    """
    if not raw or not raw.strip():
        raise PayloadError("Empty response")

    fence_match = re.search(r"```(?:json)?\s*\n*(.*?)\s*```", raw, re.DOTALL)
    json_str = (fence_match.group(1) if fence_match else raw).strip()

    start = json_str.find("{")
    end = json_str.rfind("}")
    if start == -1 or end <= start:
        raise PayloadError("No JSON object in response")
    json_str = json_str[start : end + 1]

    json_str = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", " ", json_str)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        LOGGER.debug("Primary JSON parse failed: %s", exc)
        try:
            data = json.loads(re.sub(r",\s*([\]}])", r"\1", json_str))
        except json.JSONDecodeError as exc2:
            raise PayloadError(f"Unparsable JSON: {exc2}") from exc2

    if not isinstance(data, dict):
        raise PayloadError("JSON payload is not an object")
    return data


def string_list(value: Any, key: str = "keyword") -> List[str]:
    """Coerce a list of strings or ``{key: ...}`` objects into stripped strings."""
    if not isinstance(value, list):
        return []
    out: List[str] = []
    for item in value:
        if isinstance(item, dict):
            item = item.get(key)
        if isinstance(item, (str, int, float)) and not isinstance(item, bool):
            text = str(item).strip()
            if text:
                out.append(text)
    return out


__all__ = ["GeminiBackend", "GenerativeBackend", "extract_json_payload", "string_list"]
