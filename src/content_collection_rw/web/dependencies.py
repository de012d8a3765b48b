"""
FastAPI dependencies for the HTTP interface.
"""

import logging
import uuid as uuid_lib

from fastapi import Header, HTTPException

from ..services.collection_service import CollectionService

logger = logging.getLogger(__name__)

# Collection services keyed by kind name, set by the app lifespan
_services: dict[str, CollectionService] = {}


def set_services(services: dict[str, CollectionService]) -> None:
    """Set the collection services served by the HTTP interface."""
    global _services
    _services = dict(services)
    logger.info(f"Serving collection kinds: {', '.join(sorted(_services)) or 'none'}")


def get_services() -> dict[str, CollectionService]:
    """Get every registered collection service."""
    return _services


def get_collection_service(kind: str) -> CollectionService:
    """Resolve the service for the ``{kind}`` path segment."""
    if not _services:
        raise HTTPException(status_code=503, detail="Collection services not initialized")
    service = _services.get(kind)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection kind: {kind}")
    return service


def get_trace_id(x_request_id: str | None = Header(default=None)) -> str:
    """Trace id from the X-Request-Id header, generated when absent."""
    return x_request_id or f"tid_{uuid_lib.uuid4().hex}"
