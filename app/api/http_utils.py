from __future__ import annotations

"""
Oniix Admin · HTTP Utilities
============================

Shared helpers for API routers:

- No-store JSON responses (session and tenant data must never be cached)
- Lenient integer parsing for dashboard query strings
"""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

__all__ = ["json_no_store", "parse_int"]


def json_no_store(payload: Any, status_code: int = 200) -> JSONResponse:
    """Return a JSON response with strict `no-store` caching.

    Pydantic models are dumped by alias so camelCase wire names survive.
    """
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump(by_alias=True)
    resp = JSONResponse(content=jsonable_encoder(payload), status_code=status_code)
    resp.headers["Cache-Control"] = "no-store"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp


def parse_int(raw: Optional[str], default: int) -> int:
    """`int(raw)`, or `default` when missing or not a number."""
    try:
        return int(str(raw).strip()) if raw not in (None, "") else default
    except ValueError:
        return default
