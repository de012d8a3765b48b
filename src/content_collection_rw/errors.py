"""
Error taxonomy for content collection persistence.

Not-found is never an exception: reads return ``found=False`` and deletes
return ``deleted=False``. Everything below is a real failure.
"""


class CollectionError(Exception):
    """Base class for all content collection errors."""

    pass


class CollectionValidationError(CollectionError):
    """Inbound collection payload is malformed. Raised before any mutation."""

    pass


class StoreUnavailableError(CollectionError):
    """Graph store cannot be reached (connection refused, timeout, auth)."""

    pass


class GraphQueryError(CollectionError):
    """The graph store rejected or failed to execute a statement."""

    pass


class TransactionError(CollectionError):
    """
    A write or delete statement failed and was rolled back by the store.

    Attributes:
        operation: "write" or "delete"
        uuid: Collection uuid the statement targeted
        phases: Phases the rolled-back statement comprised, in execution order
    """

    def __init__(self, operation: str, uuid: str, phases: tuple[str, ...], cause: Exception):
        self.operation = operation
        self.uuid = uuid
        self.phases = phases
        super().__init__(
            f"{operation} of collection {uuid} rolled back "
            f"(phases: {', '.join(phases)}): {cause}"
        )


class SchemaError(CollectionError):
    """Uniqueness constraints could not be read or created. Fatal at startup."""

    pass


class SchemaUnsupportedError(SchemaError):
    """The store lacks the constraint primitives; callers may skip enforcement."""

    pass
