"""Readable failure messages for storefront API responses.

Domain errors come back as ``{"error": ..., "correlation_id": ...}`` where
``error`` is a string or a ``{field: [messages]}`` mapping. Request body
validation failures come back from FastAPI as ``{"detail": [...]}``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response

# Outcomes a checkout under contention is allowed to end with
CONTENTION_STATUSES = (409, 422)


def _flatten(error) -> str:
    if isinstance(error, dict):
        parts = []
        for field, messages in error.items():
            if isinstance(messages, list):
                messages = "; ".join(str(m) for m in messages)
            parts.append(f"{field}: {messages}")
        return " | ".join(parts)
    return str(error)


def error_detail(response: Response, limit: int = 300) -> str:
    """Summarize an error response in one line."""
    try:
        body = response.json()
    except ValueError:
        return (response.text or "(empty response body)")[:limit]

    if isinstance(body, dict) and "error" in body:
        return _flatten(body["error"])[:limit]

    if isinstance(body, dict) and isinstance(body.get("detail"), list):
        return " | ".join(
            f"{'.'.join(str(p) for p in err.get('loc', []))}: {err.get('msg', '')}" for err in body["detail"]
        )[:limit]

    return str(body)[:limit]


def is_contention_outcome(response: Response) -> bool:
    """True when a checkout lost a race: a version conflict or an emptied shelf."""
    return response.status_code in CONTENTION_STATUSES
