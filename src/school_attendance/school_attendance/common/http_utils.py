from __future__ import annotations

from typing import Optional

from flask import Request, jsonify

from ..core.constants import DEFAULT_RECENT_LIMIT, MAX_RECENT_LIMIT
from ..core.exceptions import ValidationError


def get_client_ip(request: Request) -> Optional[str]:
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return request.remote_addr


def request_metadata(request: Request) -> dict:
    return {
        "ip": get_client_ip(request),
        "userAgent": request.headers.get("User-Agent") or "Unknown",
    }


def json_body(request: Request) -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_limit(raw: Optional[str]) -> int:
    if raw is None or raw == "":
        return DEFAULT_RECENT_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError("limit must be an integer") from None
    if limit < 1:
        raise ValidationError("limit must be positive")
    return min(limit, MAX_RECENT_LIMIT)


def error_response(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return jsonify(body), status
