"""
Graph layer for content collections.

Provides the FalkorDB-backed store for collections, their ordered membership
edges and the shared Thing nodes they point at:
- GraphClient executes one atomic statement per operation
- CollectionShape describes a collection kind's labels and edge types
- Statement builders compile each operation for a given shape
"""

from .client import GraphClient, StatementResult
from .schema import COLLECTION_LABEL, THING_LABEL, UNIQUE_PROPERTY
from .statements import CollectionShape, Statement

__all__ = [
    "COLLECTION_LABEL",
    "CollectionShape",
    "GraphClient",
    "Statement",
    "StatementResult",
    "THING_LABEL",
    "UNIQUE_PROPERTY",
]
