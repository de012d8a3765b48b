"""
Graph schema for content collections.

Node Labels:
    :Thing              - Shared entity keyed by uuid. Every collection and
                          every collection member is a Thing.
    :ContentCollection  - Base label carried by every collection node.
    <type labels>       - Kind-specific labels (e.g. :Curation:StoryPackage).

Relationship Types (per collection kind):
    membership edge     - Collection -> Thing, carries an integer `order`.
    extra relation      - Optional second edge type owned by another
                          subsystem; only cleared on delete.

Constraints:
    <label>(uuid) UNIQUE for every collection label, created idempotently
    on startup. FalkorDB builds a constraint in the background; only an
    OPERATIONAL constraint enforces uniqueness, and a FAILED one means the
    graph already holds duplicate values.
"""

import re

THING_LABEL = "Thing"
COLLECTION_LABEL = "ContentCollection"
UNIQUE_PROPERTY = "uuid"

# Labels and relationship types are interpolated into Cypher (FalkorDB does not
# parameterize them), so only plain identifiers are accepted.
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(value: str, kind: str = "identifier") -> str:
    """Return ``value`` unchanged if it is a safe Cypher identifier, else raise ValueError."""
    if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
        raise ValueError(f"Invalid {kind}: {value!r}. Must match {_IDENTIFIER_RE.pattern}")
    return value


# Constraint introspection. Only single-property node UNIQUE constraints are of interest.
UNIQUE_CONSTRAINT = "UNIQUE"
NODE_ENTITY = "NODE"
CONSTRAINT_OPERATIONAL = "OPERATIONAL"
CONSTRAINT_FAILED = "FAILED"

# Substrings of FalkorDB error messages (lowercased).
CONSTRAINT_EXISTS_MARKERS = ("already exists", "constraint already")
UNSUPPORTED_MARKERS = ("unknown command", "not registered", "unknown procedure", "procedure not found")
# A graph key that was never written to has no schema yet.
EMPTY_GRAPH_MARKERS = ("empty key",)


def unique_constraint_map(labels: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Map every label to the uuid property."""
    return {label: UNIQUE_PROPERTY for label in labels}
