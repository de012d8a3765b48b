"""
FastAPI application for content collections.

The lifespan opens one graph client, builds a CollectionService per kind
and ensures its uniqueness constraints before serving requests.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..config import settings
from ..errors import SchemaUnsupportedError
from ..graph.factory import create_graph_client
from ..services.collection_service import CollectionService
from ..services.kinds import DEFAULT_KINDS, CollectionKind
from .api import collections, health
from .dependencies import set_services

logger = logging.getLogger(__name__)


async def initialise_services(graph, kinds: tuple[CollectionKind, ...] = DEFAULT_KINDS) -> dict[str, CollectionService]:
    """
    Build one service per kind and ensure its constraints.

    A store without constraint support is tolerated (enforcement skipped);
    every other schema or connectivity failure aborts startup.
    """
    services: dict[str, CollectionService] = {}
    for kind in kinds:
        service = CollectionService(graph, kind.shape, name=kind.name)
        try:
            await service.initialise()
        except SchemaUnsupportedError as e:
            logger.warning(f"[{kind.name}] uniqueness constraints not enforced: {e}")
        services[kind.name] = service
    return services


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    graph = await create_graph_client()
    try:
        set_services(await initialise_services(graph))
        yield
    finally:
        set_services({})
        await graph.close()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, description=health.APP_DESCRIPTION, lifespan=lifespan)
    app.include_router(collections.router)
    app.include_router(health.router)
    return app
