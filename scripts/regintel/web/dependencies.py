"""
Dependency injection and utilities for web routes.
"""

import re
from datetime import datetime
from functools import lru_cache
from typing import Any

from fastapi import HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from regintel.services import get_approval_service as service_get_approval_service
from regintel.services import get_config as service_get_config
from regintel.services import get_db as service_get_db
from regintel.services import get_enhancer as service_get_enhancer


@lru_cache
def get_db():
    """Get cached database instance."""
    return service_get_db()


@lru_cache
def get_approval_service():
    """Get cached approval service instance."""
    return service_get_approval_service()


@lru_cache
def get_enhancer():
    """Get cached content enhancer instance."""
    return service_get_enhancer()


def get_config():
    """Get config singleton."""
    return service_get_config()


def api_response(data: Any) -> dict:
    """Wrap response data in the standard JSON envelope."""
    return {"success": True, "data": data, "timestamp": datetime.now().isoformat()}


def require_valid(result: tuple[bool, str]) -> None:
    """Raise 400 for a failed ``(is_valid, message)`` validation."""
    is_valid, message = result
    if not is_valid:
        raise HTTPException(status_code=400, detail=message)


def normalize_update_fields(fields: dict) -> dict:
    """
    Validate the enum-like fields of a regulatory update and normalize their case.

    Fields that are missing or None are left untouched. Raises 400 on an
    invalid value.
    """
    cfg = get_config()
    checks = {
        "region": (cfg.validate_region, cfg.normalize_region),
        "priority": (cfg.validate_priority, cfg.normalize_priority),
        "update_type": (cfg.validate_update_type, cfg.normalize_update_type),
    }
    normalized = dict(fields)
    for name, (validate, normalize) in checks.items():
        value = normalized.get(name)
        if value is not None:
            require_valid(validate(value))
            normalized[name] = normalize(value)
    return normalized


def pdf_response(content: bytes, title: str, prefix: str) -> Response:
    """Return PDF bytes as a download with a filename derived from the title."""
    slug = re.sub(r"[^A-Za-z0-9]+", "_", title or "document").strip("_")[:60] or "document"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{prefix}_{slug}.pdf"'},
    )


def patch_changes(body: BaseModel, required: tuple[str, ...] = ("title",)) -> dict:
    """Fields explicitly set on a PATCH body; required fields may not be null."""
    changes = body.model_dump(exclude_unset=True)
    for name in required:
        if name in changes and changes[name] is None:
            raise HTTPException(status_code=422, detail=f"{name} cannot be null")
    return changes
