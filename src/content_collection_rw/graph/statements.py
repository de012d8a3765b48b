"""
Cypher statement builder for content collections.

One code path serves every collection kind: the kind's labels and edge types
are data (a ``CollectionShape``), validated once and interpolated into the
statement text. Values always travel as parameters.

FalkorDB runs each query atomically and undoes a query that fails part-way,
so every multi-step operation is compiled into a single statement whose
phases are chained with ``WITH``. The statement is the transaction.
"""

from dataclasses import dataclass, field
from typing import Any

from .schema import COLLECTION_LABEL, THING_LABEL, validate_identifier

# Write phases
PHASE_RELATIONSHIP_CLEANUP = "relationship cleanup"
PHASE_NODE_MERGE = "node property merge"
PHASE_ITEM_EDGES = "item edge creation"

# Delete phases
PHASE_MEMBERSHIP_REMOVAL = "membership removal"
PHASE_EXTRA_RELATION_REMOVAL = "extra relation removal"
PHASE_LABEL_REMOVAL = "label removal"
PHASE_NODE_DELETION = "conditional node deletion"


@dataclass(frozen=True)
class Statement:
    """A parameterized Cypher statement and the phases it is composed of."""

    cypher: str
    params: dict[str, Any] = field(default_factory=dict)
    phases: tuple[str, ...] = ()


@dataclass(frozen=True)
class CollectionShape:
    """
    Graph shape of one collection kind.

    Attributes:
        labels: Full label set, base ``ContentCollection`` label first
        relation: Membership edge type (collection -> member)
        extra_relation: Edge type owned by another subsystem that must also be
            cleared before the node can be deleted (None = not configured)
    """

    labels: tuple[str, ...]
    relation: str
    extra_relation: str | None = None

    def __post_init__(self):
        if not self.labels:
            raise ValueError("A collection shape needs at least one label")
        for label in self.labels:
            validate_identifier(label, "label")
        validate_identifier(self.relation, "relation type")
        if self.extra_relation is not None:
            validate_identifier(self.extra_relation, "relation type")

    @classmethod
    def for_kind(
        cls, type_labels: tuple[str, ...] | list[str], relation: str, extra_relation: str | None = None
    ) -> "CollectionShape":
        """Build a shape from a kind's type labels, prepending the base collection label."""
        labels = (COLLECTION_LABEL,) + tuple(label for label in type_labels if label != COLLECTION_LABEL)
        return cls(labels=labels, relation=relation, extra_relation=extra_relation or None)

    @property
    def label_expr(self) -> str:
        """Labels joined for a node pattern, e.g. ``:ContentCollection:StoryPackage``."""
        return "".join(f":{label}" for label in self.labels)


def build_write_statement(
    shape: CollectionShape,
    uuid: str,
    properties: dict[str, Any],
    item_uuids: list[str],
) -> Statement:
    """
    Replace-all write of a collection.

    Phases:
        1. relationship cleanup  - drop every outgoing membership edge
        2. node property merge   - upsert Thing {uuid}, overwrite properties
                                   wholesale, add the collection labels
        3. item edge creation    - upsert a Thing per distinct item uuid, then
                                   one edge per list position, order = 1..N

    ``properties`` must not contain ``uuid``; it is always set from ``uuid``.
    """
    props = {**properties, "uuid": uuid}
    items = [{"uuid": item_uuid, "order": position} for position, item_uuid in enumerate(item_uuids, start=1)]
    thing_uuids = list(dict.fromkeys(item_uuids))

    clauses = [
        # 1. relationship cleanup
        f"MERGE (n:{THING_LABEL} {{uuid: $uuid}}) "
        "WITH n "
        f"OPTIONAL MATCH (n)-[old:{shape.relation}]->(:{THING_LABEL}) "
        "DELETE old "
        "WITH DISTINCT n",
        # 2. node property merge
        f"SET n = $props SET n{shape.label_expr}",
    ]
    phases = [PHASE_RELATIONSHIP_CLEANUP, PHASE_NODE_MERGE]

    if items:
        # 3. item edge creation
        clauses.append(
            "WITH n "
            "UNWIND $thing_uuids AS thing_uuid "
            f"MERGE (:{THING_LABEL} {{uuid: thing_uuid}}) "
            "WITH DISTINCT n "
            "UNWIND $items AS item "
            f"MATCH (t:{THING_LABEL} {{uuid: item.uuid}}) "
            f"CREATE (n)-[:{shape.relation} {{order: item.order}}]->(t)"
        )
        phases.append(PHASE_ITEM_EDGES)

    return Statement(
        cypher=" ".join(clauses),
        params={"uuid": uuid, "props": props, "items": items, "thing_uuids": thing_uuids},
        phases=tuple(phases),
    )


def build_read_statement(shape: CollectionShape, uuid: str) -> Statement:
    """
    Read a collection and its members ordered by edge ``order``.

    The membership match is optional, so a collection without members comes
    back as a single ``{uuid: null}`` entry; callers must collapse it.
    """
    return Statement(
        cypher=(
            f"MATCH (n{shape.label_expr} {{uuid: $uuid}}) "
            f"OPTIONAL MATCH (n)-[rel:{shape.relation}]->(t:{THING_LABEL}) "
            "WITH n, rel, t "
            "ORDER BY rel.order "
            "RETURN n.uuid AS uuid, "
            "n.publishReference AS publishReference, "
            "n.lastModified AS lastModified, "
            "collect({uuid: t.uuid}) AS items"
        ),
        params={"uuid": uuid},
    )


def build_delete_statement(shape: CollectionShape, uuid: str) -> Statement:
    """
    Delete a collection without damaging other subsystems' data on the node.

    Phases:
        1. membership removal        - drop outgoing membership edges
        2. extra relation removal    - only when the shape configures one
        3. label removal             - drop collection labels, keep :Thing
        4. conditional node deletion - delete the node only if no edge of
                                       any type remains

    The node is matched on :Thing alone, not on the collection labels. A
    Thing that never was a collection and has no edges is deleted too.
    """
    clauses = [
        f"MATCH (n:{THING_LABEL} {{uuid: $uuid}}) "
        f"OPTIONAL MATCH (n)-[rel:{shape.relation}]->(:{THING_LABEL}) "
        "DELETE rel "
        "WITH DISTINCT n"
    ]
    phases = [PHASE_MEMBERSHIP_REMOVAL]

    if shape.extra_relation:
        clauses.append(
            f"OPTIONAL MATCH (n)-[extra:{shape.extra_relation}]->(:{THING_LABEL}) "
            "DELETE extra "
            "WITH DISTINCT n"
        )
        phases.append(PHASE_EXTRA_RELATION_REMOVAL)

    clauses.append(f"REMOVE n{shape.label_expr}")
    phases.append(PHASE_LABEL_REMOVAL)

    clauses.append(
        "WITH n "
        "OPTIONAL MATCH (n)-[remaining]-() "
        "WITH n, count(remaining) AS remaining_count "
        "WHERE remaining_count = 0 "
        "DELETE n"
    )
    phases.append(PHASE_NODE_DELETION)

    return Statement(cypher=" ".join(clauses), params={"uuid": uuid}, phases=tuple(phases))


def build_count_statement(shape: CollectionShape) -> Statement:
    """Count nodes carrying the shape's full label set."""
    return Statement(cypher=f"MATCH (n{shape.label_expr}) RETURN count(n) AS c")
