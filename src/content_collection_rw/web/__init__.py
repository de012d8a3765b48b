"""HTTP interface for content collections."""
