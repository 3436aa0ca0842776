"""
Scan API Routes

No business logic lives here.
Routes validate input, run the scanner, shape the response.
"""

from __future__ import annotations

from typing import Any, AsyncIterator

import httpx
import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ValidationError

from migration_scanner.core.exceptions import InvalidTargetError
from migration_scanner.core.http import create_client
from migration_scanner.core.text import to_error_message
from migration_scanner.engines.annotations.engine import generate_annotations
from migration_scanner.engines.scanner.engine import prepare_target, scan
from migration_scanner.engines.scope.engine import generate_migration_scope

logger = structlog.get_logger(__name__)
router = APIRouter()


# ─────────────────────────────────────────────
# Request / Response Schemas
# ─────────────────────────────────────────────

class ScanRequest(BaseModel):
    url: str | None = None


class ScanResponse(BaseModel):
    result: dict[str, Any]
    annotations: list[dict[str, Any]]
    scope: dict[str, Any]


# ─────────────────────────────────────────────
# Dependencies
# ─────────────────────────────────────────────

async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with create_client() as client:
        yield client


# ─────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────

@router.post("", response_model=ScanResponse)
async def run_scan(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ScanResponse:
    """Scan one WordPress site and return the result with its annotations and scope summary."""
    try:
        body = ScanRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")

    try:
        target = prepare_target(body.url)
    except InvalidTargetError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info("Scan requested", url=target)

    try:
        result = await scan(target, client)
    except Exception as e:
        logger.error("Scan failed", url=target, error=to_error_message(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=to_error_message(e) or "Scan failed",
        )

    return ScanResponse(
        result=result.to_json_dict(),
        annotations=[a.to_json_dict() for a in generate_annotations(result)],
        scope=generate_migration_scope(result).to_json_dict(),
    )
