# src/pipeline/parsing.py — v1
"""Locate structured content (JSON objects, HTML documents) in AI responses."""

from __future__ import annotations

import json
import re
from typing import Any

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_HTML_FENCE = re.compile(r"```(?:html)?\s*\n([\s\S]*?)```", re.IGNORECASE)
_HTML_START = re.compile(r"<!DOCTYPE html|<html", re.IGNORECASE)


class ResponseParseError(ValueError):
    """The AI response holds no usable structured content."""


def strip_code_fences(text: str) -> str:
    """Drop ``` fence lines around a response body."""
    text = text.strip()
    if text.startswith("```"):
        lines = [ln for ln in text.split("\n") if not ln.strip().startswith("```")]
        text = "\n".join(lines)
    return text


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the outermost JSON object in `text`.

    Raises:
        ResponseParseError: If no JSON object can be decoded.
    """
    cleaned = strip_code_fences(text)
    match = _JSON_OBJECT.search(cleaned)
    if match is None:
        raise ResponseParseError("No JSON object found in AI response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Invalid JSON in AI response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ResponseParseError("AI response JSON is not an object")
    return parsed


def extract_html(text: str) -> str:
    """Return the HTML document in `text` (fenced or bare).

    Raises:
        ResponseParseError: If the response contains no HTML.
    """
    fenced = _HTML_FENCE.search(text)
    if fenced is not None:
        text = fenced.group(1)
    start = _HTML_START.search(text)
    if start is None:
        raise ResponseParseError("No HTML document found in AI response")
    html = text[start.start():]
    end = html.lower().rfind("</html>")
    if end != -1:
        html = html[: end + len("</html>")]
    return html.strip()
