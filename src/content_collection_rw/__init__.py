"""
Content collection read/write service.

Persists ordered content collections as nodes and ordered, typed edges in a
FalkorDB property graph with replace-all write semantics.
"""

__version__ = "1.0.0"
