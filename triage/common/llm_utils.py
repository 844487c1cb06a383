"""Shared helpers for turning raw LLM replies into typed values."""

from __future__ import annotations

import json
from typing import Any


def strip_code_fences(raw: str) -> str:
    """Drop markdown fence lines (```json ... ```) around a reply."""
    text = raw.strip()
    if not text.startswith("```"):
        return text
    lines = [l for l in text.split("\n") if not l.strip().startswith("```")]
    return "\n".join(lines).strip()


def parse_llm_json(raw: str) -> dict:
    """Parse a JSON object from an LLM reply.

    Tries in order:
    1. Strip markdown code fences, then json.loads
    2. Extract substring between first '{' and last '}', then json.loads
    3. Return empty dict
    """
    if not raw:
        return {}

    try:
        data = json.loads(strip_code_fences(raw))
        if isinstance(data, dict):
            return data
    except json.JSONDecodeError:
        pass

    start = raw.find("{")
    end = raw.rfind("}") + 1
    if start >= 0 and end > start:
        try:
            data = json.loads(raw[start:end])
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass

    return {}


def coerce_bool(value: Any) -> bool:
    """Interpret JSON-ish booleans, including "true"/"false" strings."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def coerce_unit_float(value: Any, default: float = 0.0) -> float:
    """Parse a number and clamp it to [0, 1]."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return max(0.0, min(1.0, number))
