"""Content collection data models.

A collection is an ordered list of references to shared Thing nodes. Items
hold only a uuid; they are pointers, not owned sub-objects.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import CollectionValidationError
from .validators import Uuid

logger = logging.getLogger(__name__)


class Item(BaseModel):
    """Reference to a Thing by uuid."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    uuid: Uuid


class ContentCollection(BaseModel):
    """An ordered grouping of content references."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    uuid: Uuid
    items: list[Item] = Field(default_factory=list)
    publish_reference: str = Field(default="", alias="publishReference")
    last_modified: str = Field(default="", alias="lastModified")

    @property
    def item_uuids(self) -> list[str]:
        return [item.uuid for item in self.items]

    def node_properties(self) -> dict[str, Any]:
        """Scalar properties persisted on the collection node (uuid excluded)."""
        return {
            "publishReference": self.publish_reference,
            "lastModified": self.last_modified,
        }

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the wire field names."""
        return self.model_dump(by_alias=True)


def decode_collection(payload: bytes | str | Mapping[str, Any]) -> tuple[ContentCollection, str]:
    """
    Decode an inbound payload into a collection and its identity.

    Raises:
        CollectionValidationError: payload is not JSON or not a valid collection
    """
    try:
        if isinstance(payload, (bytes, bytearray, str)):
            collection = ContentCollection.model_validate_json(payload)
        else:
            collection = ContentCollection.model_validate(dict(payload))
    except ValidationError as e:
        raise CollectionValidationError(f"Invalid content collection: {e}") from e
    except (TypeError, ValueError) as e:
        raise CollectionValidationError(f"Invalid content collection payload: {e}") from e

    return collection, collection.uuid
