"""Shared Pydantic types for collection payloads."""

from typing import Annotated

from pydantic import StringConstraints

Uuid = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
"""Non-empty identifier of a Thing or collection."""
