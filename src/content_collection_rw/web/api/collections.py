"""
Content collection endpoints.

PUT/GET/DELETE /content-collection/{kind}/{uuid}
GET            /content-collection/{kind}/__count
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from ...errors import CollectionValidationError, GraphQueryError, StoreUnavailableError, TransactionError
from ...services.collection_service import CollectionService
from ..dependencies import get_collection_service, get_trace_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content-collection", tags=["content-collection"])

_STORE_ERRORS = (TransactionError, GraphQueryError, StoreUnavailableError)


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str


@router.get("/{kind}/__count", response_model=int)
async def count_collections(service: CollectionService = Depends(get_collection_service)) -> int:
    """Number of collections of this kind."""
    try:
        return await service.count()
    except _STORE_ERRORS as e:
        logger.error(f"Count of {service.name} failed: {e}")
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.get("/{kind}/{uuid}")
async def read_collection(
    uuid: str,
    service: CollectionService = Depends(get_collection_service),
    trace_id: str = Depends(get_trace_id),
) -> dict[str, Any]:
    """Read a collection and its ordered items."""
    try:
        collection, found = await service.read(uuid, trace_id)
    except _STORE_ERRORS as e:
        logger.error(f"Read of {uuid} failed (trace_id={trace_id}): {e}")
        raise HTTPException(status_code=503, detail=str(e)) from e

    if not found:
        raise HTTPException(status_code=404, detail=f"Content collection with uuid {uuid} not found")
    return collection.to_wire()


@router.put("/{kind}/{uuid}", response_model=MessageResponse)
async def write_collection(
    uuid: str,
    request: Request,
    service: CollectionService = Depends(get_collection_service),
    trace_id: str = Depends(get_trace_id),
) -> MessageResponse:
    """Replace a collection and its whole membership."""
    body = await request.body()
    try:
        collection, payload_uuid = service.decode(body)
    except CollectionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    if payload_uuid != uuid:
        raise HTTPException(
            status_code=400,
            detail=f"Uuids from payload ({payload_uuid}) and request ({uuid}) do not match",
        )

    try:
        await service.write(collection, trace_id)
    except _STORE_ERRORS as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    return MessageResponse(message="PUT successful")


@router.delete("/{kind}/{uuid}", status_code=204)
async def delete_collection(
    uuid: str,
    service: CollectionService = Depends(get_collection_service),
    trace_id: str = Depends(get_trace_id),
) -> Response:
    """Delete a collection. 404 when no node was removed."""
    try:
        deleted = await service.delete(uuid, trace_id)
    except _STORE_ERRORS as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Content collection with uuid {uuid} not deleted")
    return Response(status_code=204)
