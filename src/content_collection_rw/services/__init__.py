from .collection_service import CollectionService
from .kinds import CONTENT_PACKAGE, DEFAULT_KINDS, STORY_PACKAGE, CollectionKind

__all__ = ["CONTENT_PACKAGE", "DEFAULT_KINDS", "STORY_PACKAGE", "CollectionKind", "CollectionService"]
