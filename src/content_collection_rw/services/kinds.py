"""
Collection kinds served by this application.

Kinds share the ContentCollection base label and one code path; they differ
in type labels, membership edge type and the extra relation cleared on delete.
"""

from dataclasses import dataclass

from ..graph.statements import CollectionShape


@dataclass(frozen=True)
class CollectionKind:
    """A collection kind and the URL segment it is served under."""

    name: str
    type_labels: tuple[str, ...]
    relation: str
    extra_relation_for_delete: str | None = None

    @property
    def shape(self) -> CollectionShape:
        return CollectionShape.for_kind(self.type_labels, self.relation, self.extra_relation_for_delete)


STORY_PACKAGE = CollectionKind(
    name="story-package",
    type_labels=("Curation", "StoryPackage"),
    relation="SELECTS",
    extra_relation_for_delete="IS_CURATED_FOR",
)

CONTENT_PACKAGE = CollectionKind(
    name="content-package",
    type_labels=(),
    relation="CONTAINS",
)

DEFAULT_KINDS: tuple[CollectionKind, ...] = (STORY_PACKAGE, CONTENT_PACKAGE)
