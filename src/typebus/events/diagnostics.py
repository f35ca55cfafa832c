"""Best-effort conversion of event payloads to log-friendly text."""

from __future__ import annotations

from typing import Any

from pydantic_core import to_json

PARSE_ERROR_PLACEHOLDER = "[PARSE ERROR]"


def describe_payload(payload: Any, max_chars: int | None = None) -> str:
    """Serialize ``payload`` to JSON text for diagnostics.

    Never raises: anything that cannot be serialized is reported as
    ``PARSE_ERROR_PLACEHOLDER``.
    """
    try:
        text = to_json(payload).decode("utf-8")
        if max_chars is not None and len(text) > max_chars:
            text = text[:max_chars] + "…"
    except Exception:  # noqa: BLE001 - diagnostics must never block delivery.
        return PARSE_ERROR_PLACEHOLDER
    return text or PARSE_ERROR_PLACEHOLDER
