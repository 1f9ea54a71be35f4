"""Thin client for the Gemini ``generateContent`` endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests
from flask import current_app

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-pro"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1"


class PlanGenerationError(Exception):
    """Base exception for AI plan generation."""

    pass


class PlanNotConfiguredError(PlanGenerationError):
    """Raised when no API key is configured."""

    pass


class GeminiError(PlanGenerationError):
    """Raised when the Gemini API is unreachable or answers with an error."""

    pass


class PlanParseError(PlanGenerationError):
    """Raised when the model output holds no usable JSON object."""

    pass


def _api_key() -> str:
    key = (current_app.config.get("GEMINI_API_KEY") or "").strip()
    if not key:
        logger.warning("Gemini API key is missing")
        raise PlanNotConfiguredError("AI service not configured")
    return key


def generate_text(prompt: str) -> Optional[str]:
    """
    Send one prompt and return the first candidate's text.

    Raises:
        PlanNotConfiguredError: If no API key is configured
        GeminiError: If the request fails or returns a non-2xx status
    """
    config = current_app.config
    api_key = _api_key()
    model = config.get("GEMINI_MODEL") or DEFAULT_MODEL
    base_url = (config.get("GEMINI_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
    url = f"{base_url}/models/{model}:generateContent"

    body = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": 0.7, "maxOutputTokens": 16384},
    }
    try:
        resp = requests.post(
            url,
            params={"key": api_key},
            json=body,
            timeout=config.get("AI_REQUEST_TIMEOUT_SECONDS", 60),
        )
        resp.raise_for_status()
        data: Dict[str, Any] = resp.json()
    except requests.RequestException as e:
        # never log the URL, it carries the key
        logger.error("Gemini API request failed: %s", type(e).__name__)
        raise GeminiError("AI service request failed") from e
    except ValueError as e:
        logger.error("Gemini API returned a non-JSON body")
        raise GeminiError("AI service returned an invalid response") from e

    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        logger.warning("Gemini API response had no candidate text")
        return None


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Parse the span between the first ``{`` and the last ``}``."""
    if not text:
        raise PlanParseError("empty AI response")
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise PlanParseError("no JSON object in AI response")
    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        logger.error("Failed to parse AI response as JSON")
        raise PlanParseError("malformed JSON in AI response") from e
    if not isinstance(parsed, dict):
        raise PlanParseError("AI response JSON is not an object")
    return parsed
