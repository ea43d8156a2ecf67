"""Error body extraction for load test failure messages.

The webhook answers errors in three shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- HTTPException (403/502): {"detail": "msg"}
- Coverage rejection (400): {"error": {"createdfrom": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Return a compact, human-readable error message for a failed response."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    detail = body.get("detail")
    if isinstance(detail, list):
        parts = []
        for err in detail:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)
    if detail is not None:
        return str(detail)

    error = body.get("error")
    if isinstance(error, dict):
        return " | ".join(f"{field}: {messages}" for field, messages in error.items())
    if error is not None:
        return str(error)

    return str(body)[:300]
