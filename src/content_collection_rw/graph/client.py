"""
FalkorDB graph client for content collections.

Narrow transactional interface over the store:
- execute(): one statement with write intent (GRAPH.QUERY), atomic in FalkorDB
- read():    one statement with read intent (GRAPH.RO_QUERY)
- ping():    connectivity check
- list_unique_constraints() / ensure_unique_constraints(): schema setup

The client holds no collection state. It is created once per process and
injected into every CollectionService.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from falkordb.asyncio import FalkorDB
from redis.asyncio import BlockingConnectionPool
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..errors import GraphQueryError, SchemaError, SchemaUnsupportedError, StoreUnavailableError
from .schema import (
    CONSTRAINT_EXISTS_MARKERS,
    CONSTRAINT_FAILED,
    CONSTRAINT_OPERATIONAL,
    EMPTY_GRAPH_MARKERS,
    NODE_ENTITY,
    UNIQUE_CONSTRAINT,
    UNSUPPORTED_MARKERS,
    validate_identifier,
)
from .statements import Statement

logger = logging.getLogger(__name__)

_UNAVAILABLE = (RedisConnectionError, RedisTimeoutError, OSError)


def _matches(error: Exception, markers: tuple[str, ...]) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in markers)


@dataclass
class StatementResult:
    """Rows and mutation counters of one executed statement."""

    rows: list[list[Any]] = field(default_factory=list)
    nodes_created: int = 0
    nodes_deleted: int = 0
    relationships_created: int = 0
    relationships_deleted: int = 0

    @classmethod
    def from_query_result(cls, result) -> "StatementResult":
        return cls(
            rows=list(result.result_set or []),
            nodes_created=int(result.nodes_created or 0),
            nodes_deleted=int(result.nodes_deleted or 0),
            relationships_created=int(result.relationships_created or 0),
            relationships_deleted=int(result.relationships_deleted or 0),
        )


class GraphClient:
    """
    Async FalkorDB client for the content collection graph.

    Manages a Redis connection pool (FalkorDB speaks the Redis protocol)
    and the selected graph.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: str | None = None,
        graph_name: str = "content_graph",
        max_connections: int = 16,
        socket_timeout: float | None = None,
        constraint_timeout: float = 30.0,
        constraint_poll_interval: float = 0.2,
    ):
        self.host = host
        self.port = port
        self.password = password
        self.graph_name = graph_name
        self.max_connections = max_connections
        self.socket_timeout = socket_timeout
        self.constraint_timeout = constraint_timeout
        self.constraint_poll_interval = constraint_poll_interval

        self._pool: BlockingConnectionPool | None = None
        self._db: FalkorDB | None = None
        self._graph = None
        self._initialized = False

    async def initialize(self) -> None:
        """
        Create the connection pool and select the graph.

        The driver probes the server while connecting, so an unreachable store
        fails here.

        Raises:
            StoreUnavailableError: the store could not be reached (pool released)
        """
        if self._initialized:
            return

        self._pool = BlockingConnectionPool(
            host=self.host,
            port=self.port,
            password=self.password,
            max_connections=self.max_connections,
            socket_timeout=self.socket_timeout,
            timeout=None,
            decode_responses=True,
        )

        try:
            self._db = FalkorDB(connection_pool=self._pool)
            self._graph = self._db.select_graph(self.graph_name)
        except _UNAVAILABLE as e:
            await self._pool.aclose()
            self._pool = None
            self._db = None
            self._graph = None
            raise StoreUnavailableError(f"Graph store unreachable at {self.host}:{self.port}: {e}") from e

        self._initialized = True
        logger.info(f"GraphClient initialized: {self.host}:{self.port}/{self.graph_name}")

    @property
    def graph(self):
        """Expose graph for direct query access."""
        if self._graph is None:
            raise RuntimeError("GraphClient not initialized. Call initialize() first.")
        return self._graph

    # ── Statement execution ─────────────────────────────────────────────

    async def execute(self, statement: Statement) -> StatementResult:
        """Run a statement with write intent. The whole statement commits or none of it does."""
        try:
            result = await self.graph.query(statement.cypher, params=statement.params)
        except _UNAVAILABLE as e:
            raise StoreUnavailableError(f"Graph store unreachable at {self.host}:{self.port}: {e}") from e
        except ResponseError as e:
            raise GraphQueryError(str(e)) from e
        return StatementResult.from_query_result(result)

    async def read(self, statement: Statement) -> StatementResult:
        """Run a statement with read intent."""
        try:
            result = await self.graph.ro_query(statement.cypher, params=statement.params)
        except _UNAVAILABLE as e:
            raise StoreUnavailableError(f"Graph store unreachable at {self.host}:{self.port}: {e}") from e
        except ResponseError as e:
            raise GraphQueryError(str(e)) from e
        return StatementResult.from_query_result(result)

    async def ping(self) -> None:
        """Raise StoreUnavailableError unless the store answers a PING."""
        if self._db is None:
            raise StoreUnavailableError("GraphClient not initialized")
        try:
            await self._db.connection.ping()
        except (*_UNAVAILABLE, ResponseError) as e:
            raise StoreUnavailableError(f"Graph store unreachable at {self.host}:{self.port}: {e}") from e

    # ── Schema ──────────────────────────────────────────────────────────

    async def list_unique_constraints(self) -> dict[tuple[str, str], str]:
        """
        Return the build status of every single-property node UNIQUE constraint.

        Keys are (label, property) pairs, values the store's status
        (OPERATIONAL, UNDER CONSTRUCTION or FAILED). Relationship constraints
        and composite constraints are not reported.
        """
        try:
            constraints = await self.graph.list_constraints()
        except _UNAVAILABLE as e:
            raise StoreUnavailableError(f"Graph store unreachable at {self.host}:{self.port}: {e}") from e
        except ResponseError as e:
            if _matches(e, EMPTY_GRAPH_MARKERS):
                return {}
            if _matches(e, UNSUPPORTED_MARKERS):
                raise SchemaUnsupportedError(f"Graph store cannot list constraints: {e}") from e
            raise SchemaError(f"Failed to list constraints: {e}") from e

        existing: dict[tuple[str, str], str] = {}
        for constraint in constraints:
            if str(constraint["type"]).upper() != UNIQUE_CONSTRAINT:
                continue
            if str(constraint["entitytype"]).upper() != NODE_ENTITY:
                continue
            # Composite constraints don't enforce uuid uniqueness alone.
            properties = constraint["properties"]
            if isinstance(properties, (list, tuple)) and len(properties) == 1:
                existing[(constraint["label"], properties[0])] = str(constraint["status"]).upper()
        return existing

    async def ensure_unique_constraints(self, constraints: dict[str, str]) -> list[tuple[str, str]]:
        """
        Ensure an OPERATIONAL node UNIQUE constraint exists for every label -> property pair.

        Existing constraints are read first and skipped. A creation attempt that
        races another process and reports "already exists" counts as success.
        FalkorDB builds constraints in the background, so the call waits until
        every new or still-building constraint is OPERATIONAL.

        Returns:
            The (label, property) pairs that were created by this call.

        Raises:
            SchemaUnsupportedError: store has no constraint support
            SchemaError: constraints could not be read, created or built
        """
        for label, prop in constraints.items():
            validate_identifier(label, "label")
            validate_identifier(prop, "property")

        existing = await self.list_unique_constraints()
        created: list[tuple[str, str]] = []
        pending: list[tuple[str, str]] = []

        for label, prop in constraints.items():
            status = existing.get((label, prop))
            if status == CONSTRAINT_FAILED:
                raise SchemaError(
                    f"Unique constraint {label}({prop}) failed to build; "
                    f"graph {self.graph_name} holds duplicate {prop} values for :{label}"
                )
            if status is not None:
                logger.debug(f"Unique constraint already present: {label}({prop}) [{status}]")
                if status != CONSTRAINT_OPERATIONAL:
                    pending.append((label, prop))
                continue

            try:
                # Also creates the range index the constraint is built on
                await self.graph.create_node_unique_constraint(label, prop)
            except ResponseError as e:
                if _matches(e, CONSTRAINT_EXISTS_MARKERS):
                    logger.debug(f"Unique constraint {label}({prop}) created concurrently, skipping")
                    pending.append((label, prop))
                    continue
                if _matches(e, UNSUPPORTED_MARKERS):
                    raise SchemaUnsupportedError(f"Graph store cannot create constraints: {e}") from e
                raise SchemaError(f"Failed to create unique constraint {label}({prop}): {e}") from e
            except _UNAVAILABLE as e:
                raise StoreUnavailableError(f"Graph store unreachable at {self.host}:{self.port}: {e}") from e

            created.append((label, prop))
            pending.append((label, prop))
            logger.info(f"Created unique constraint {label}({prop}) on graph {self.graph_name}")

        if pending:
            await self._wait_until_operational(pending)

        return created

    async def _wait_until_operational(self, pending: list[tuple[str, str]]) -> None:
        """Poll constraint status until every pair is OPERATIONAL; FAILED or timeout raises SchemaError."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.constraint_timeout
        remaining = set(pending)

        while True:
            statuses = await self.list_unique_constraints()
            for label, prop in sorted(remaining):
                status = statuses.get((label, prop))
                if status == CONSTRAINT_OPERATIONAL:
                    remaining.discard((label, prop))
                elif status == CONSTRAINT_FAILED:
                    raise SchemaError(
                        f"Unique constraint {label}({prop}) failed to build; "
                        f"graph {self.graph_name} holds duplicate {prop} values for :{label}"
                    )
            if not remaining:
                return
            if loop.time() >= deadline:
                waiting = ", ".join(f"{label}({prop})" for label, prop in sorted(remaining))
                raise SchemaError(f"Unique constraint(s) not operational after {self.constraint_timeout}s: {waiting}")
            await asyncio.sleep(self.constraint_poll_interval)

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            try:
                await self._pool.aclose()
                logger.info("GraphClient connection pool closed")
            except Exception as e:
                logger.warning(f"Error closing GraphClient pool: {e}")
            finally:
                self._pool = None
                self._db = None
                self._graph = None
                self._initialized = False

