"""
Collection Service - read/write/delete/count for one collection kind.

Each call compiles exactly one statement and runs it as one transaction
against the graph store. No state is shared between calls and there is no
in-process locking: concurrent writes to the same uuid are ordered by the
store alone, last commit wins.
"""

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import GraphQueryError, TransactionError
from ..graph.client import GraphClient
from ..graph.schema import unique_constraint_map
from ..graph.statements import (
    CollectionShape,
    build_count_statement,
    build_delete_statement,
    build_read_statement,
    build_write_statement,
)
from ..models.collection import ContentCollection, Item, decode_collection

logger = logging.getLogger(__name__)


def _collapse_items(raw_items: list[Any] | None) -> list[Item]:
    """
    Turn collected ``{uuid: ...}`` maps into items.

    The membership match is optional, so a collection without members yields
    exactly one map with a null uuid. That row is not a member.
    """
    raw_items = raw_items or []
    if len(raw_items) == 1 and not (raw_items[0] or {}).get("uuid"):
        return []
    return [Item(uuid=entry["uuid"]) for entry in raw_items]


class CollectionService:
    """
    Persistence for one collection kind.

    Args:
        graph: Initialized GraphClient (shared between kinds)
        shape: Labels and edge types of this kind
        name: Kind name used in log lines
    """

    def __init__(self, graph: GraphClient, shape: CollectionShape, name: str | None = None):
        self._graph = graph
        self.shape = shape
        self.name = name or ":".join(shape.labels)

    async def initialise(self) -> list[tuple[str, str]]:
        """
        Ensure uuid uniqueness constraints exist for every label of this kind.

        Raises:
            SchemaUnsupportedError: store lacks constraint support (caller may degrade)
            SchemaError: constraints could not be read or created
        """
        created = await self._graph.ensure_unique_constraints(unique_constraint_map(self.shape.labels))
        logger.info(f"[{self.name}] schema ready ({len(created)} constraint(s) created)")
        return created

    async def check(self) -> None:
        """Raise StoreUnavailableError if the graph store cannot be reached."""
        await self._graph.ping()

    async def read(self, uuid: str, trace_id: str | None = None) -> tuple[ContentCollection | None, bool]:
        """
        Read a collection and its ordered members.

        Returns:
            (collection, True) when found, (None, False) when no node matches.

        Raises:
            GraphQueryError, StoreUnavailableError: the read itself failed
        """
        result = await self._graph.read(build_read_statement(self.shape, uuid))
        if not result.rows:
            logger.debug(f"[{self.name}] collection {uuid} not found (trace_id={trace_id})")
            return None, False

        row = result.rows[0]
        collection = ContentCollection(
            uuid=row[0],
            publishReference=row[1] or "",
            lastModified=row[2] or "",
            items=_collapse_items(row[3]),
        )
        return collection, True

    async def write(self, collection: ContentCollection, trace_id: str | None = None) -> None:
        """
        Replace the collection node's properties, labels and entire membership.

        Raises:
            TransactionError: the statement failed and nothing was committed
            StoreUnavailableError: the store could not be reached
        """
        statement = build_write_statement(
            self.shape,
            collection.uuid,
            collection.node_properties(),
            collection.item_uuids,
        )
        try:
            result = await self._graph.execute(statement)
        except GraphQueryError as e:
            logger.error(f"[{self.name}] write of {collection.uuid} failed (trace_id={trace_id}): {e}")
            raise TransactionError("write", collection.uuid, statement.phases, e) from e

        logger.info(
            f"[{self.name}] wrote collection {collection.uuid} with {len(collection.items)} item(s) "
            f"(trace_id={trace_id}, edges removed={result.relationships_deleted}, "
            f"edges created={result.relationships_created})"
        )

    async def delete(self, uuid: str, trace_id: str | None = None) -> bool:
        """
        Remove the collection's edges and labels, and the node if nothing else is attached.

        Returns:
            True if the node was physically deleted, False if it was absent or
            still carries other relationships.

        Raises:
            TransactionError: the statement failed and nothing was committed
            StoreUnavailableError: the store could not be reached
        """
        statement = build_delete_statement(self.shape, uuid)
        try:
            result = await self._graph.execute(statement)
        except GraphQueryError as e:
            logger.error(f"[{self.name}] delete of {uuid} failed (trace_id={trace_id}): {e}")
            raise TransactionError("delete", uuid, statement.phases, e) from e

        deleted = result.nodes_deleted > 0
        logger.info(
            f"[{self.name}] delete of collection {uuid}: node deleted={deleted}, "
            f"edges removed={result.relationships_deleted} (trace_id={trace_id})"
        )
        return deleted

    async def count(self) -> int:
        """Number of nodes carrying this kind's full label set."""
        result = await self._graph.read(build_count_statement(self.shape))
        if not result.rows:
            return 0
        return int(result.rows[0][0])

    @staticmethod
    def decode(payload: bytes | str | Mapping[str, Any]) -> tuple[ContentCollection, str]:
        """Decode an inbound payload into (collection, uuid)."""
        return decode_collection(payload)
