"""
Health endpoints.

/__health reports one connectivity check per collection kind.
/__gtg answers 200 only when every check passes.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from ...config import settings
from ...errors import StoreUnavailableError
from ...services.collection_service import CollectionService
from ..dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

APP_DESCRIPTION = "A RESTful API for managing Content Collections in a graph store"


async def _run_check(kind: str, service: CollectionService) -> dict[str, Any]:
    output = "OK"
    ok = True
    try:
        await asyncio.wait_for(service.check(), timeout=settings.health_check_timeout)
    except asyncio.TimeoutError:
        ok = False
        output = f"Timed out after {settings.health_check_timeout}s"
    except StoreUnavailableError as e:
        ok = False
        output = str(e)

    if not ok:
        logger.warning(f"Health check for {kind} failed: {output}")

    return {
        "id": f"check-graph-connectivity-{kind}",
        "name": "Check connectivity to the graph store",
        "ok": ok,
        "severity": 1,
        "businessImpact": "Cannot read/write content via this writer",
        "technicalSummary": f"Service mapped on URL content-collection/{kind} cannot connect to the graph store",
        "panicGuide": f"Check the graph store at {settings.falkordb.host}:{settings.falkordb.port}",
        "checkOutput": output,
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }


async def _run_checks(services: dict[str, CollectionService]) -> list[dict[str, Any]]:
    return list(await asyncio.gather(*(_run_check(kind, service) for kind, service in sorted(services.items()))))


@router.get("/__health")
async def health(services: dict[str, CollectionService] = Depends(get_services)) -> dict[str, Any]:
    """Health report in schema version 1 format."""
    checks = await _run_checks(services)
    return {
        "schemaVersion": 1,
        "systemCode": settings.app_system_code,
        "name": settings.app_name,
        "description": APP_DESCRIPTION,
        "checks": checks,
        "ok": bool(checks) and all(check["ok"] for check in checks),
    }


@router.get("/__gtg")
async def good_to_go(services: dict[str, CollectionService] = Depends(get_services)):
    """200 OK when every connectivity check passes, 503 otherwise."""
    checks = await _run_checks(services)
    if not checks:
        return JSONResponse(status_code=503, content={"detail": "Collection services not initialized"})
    failed = [check["checkOutput"] for check in checks if not check["ok"]]
    if failed:
        return PlainTextResponse("; ".join(failed), status_code=503)
    return PlainTextResponse("OK")
