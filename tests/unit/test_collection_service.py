"""
Unit tests for CollectionService.

The graph client is mocked; these tests pin down how results are
marshaled, how failures are classified, and which intent each call uses.
"""

from unittest.mock import AsyncMock

import pytest

from content_collection_rw.errors import (
    CollectionValidationError,
    GraphQueryError,
    SchemaUnsupportedError,
    StoreUnavailableError,
    TransactionError,
)
from content_collection_rw.graph.client import GraphClient, StatementResult
from content_collection_rw.graph.statements import (
    PHASE_ITEM_EDGES,
    PHASE_NODE_MERGE,
    PHASE_RELATIONSHIP_CLEANUP,
)
from content_collection_rw.models.collection import ContentCollection
from content_collection_rw.services.collection_service import CollectionService
from content_collection_rw.services.kinds import CONTENT_PACKAGE, STORY_PACKAGE

CC_UUID = "cc-12345"


def make_collection(item_count: int) -> ContentCollection:
    return ContentCollection(
        uuid=CC_UUID,
        publishReference="test12345",
        lastModified="2016-08-25T06:06:23.532Z",
        items=[{"uuid": f"Item{i}"} for i in range(item_count)],
    )


@pytest.fixture
def graph():
    graph = AsyncMock(spec=GraphClient)
    graph.execute.return_value = StatementResult()
    graph.read.return_value = StatementResult()
    return graph


@pytest.fixture
def story_service(graph):
    return CollectionService(graph, STORY_PACKAGE.shape, name=STORY_PACKAGE.name)


@pytest.fixture
def content_service(graph):
    return CollectionService(graph, CONTENT_PACKAGE.shape, name=CONTENT_PACKAGE.name)


class TestRead:
    @pytest.mark.asyncio
    async def test_not_found_is_not_an_error(self, story_service, graph):
        graph.read.return_value = StatementResult(rows=[])

        collection, found = await story_service.read("never-written", "tid_1")

        assert found is False
        assert collection is None

    @pytest.mark.asyncio
    async def test_reads_with_read_intent(self, story_service, graph):
        await story_service.read(CC_UUID)
        graph.read.assert_awaited_once()
        graph.execute.assert_not_called()
        assert graph.read.call_args[0][0].params == {"uuid": CC_UUID}

    @pytest.mark.asyncio
    async def test_items_in_returned_order(self, story_service, graph):
        graph.read.return_value = StatementResult(
            rows=[[CC_UUID, "test12345", "2016-08-25T06:06:23.532Z", [{"uuid": "b"}, {"uuid": "a"}, {"uuid": "c"}]]]
        )

        collection, found = await story_service.read(CC_UUID)

        assert found is True
        assert collection.uuid == CC_UUID
        assert collection.publish_reference == "test12345"
        assert collection.last_modified == "2016-08-25T06:06:23.532Z"
        assert collection.item_uuids == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_null_member_placeholder_collapses_to_empty_list(self, story_service, graph):
        graph.read.return_value = StatementResult(rows=[[CC_UUID, "ref", "ts", [{"uuid": None}]]])

        collection, found = await story_service.read(CC_UUID)

        assert found is True
        assert collection.items == []

    @pytest.mark.asyncio
    async def test_single_real_member_is_kept(self, story_service, graph):
        graph.read.return_value = StatementResult(rows=[[CC_UUID, "ref", "ts", [{"uuid": "only"}]]])

        collection, _ = await story_service.read(CC_UUID)
        assert collection.item_uuids == ["only"]

    @pytest.mark.asyncio
    async def test_missing_scalar_properties_read_as_empty(self, story_service, graph):
        graph.read.return_value = StatementResult(rows=[[CC_UUID, None, None, [{"uuid": None}]]])

        collection, _ = await story_service.read(CC_UUID)
        assert collection.publish_reference == ""
        assert collection.last_modified == ""

    @pytest.mark.asyncio
    async def test_query_failure_is_distinct_from_not_found(self, story_service, graph):
        graph.read.side_effect = GraphQueryError("boom")

        with pytest.raises(GraphQueryError):
            await story_service.read(CC_UUID)


class TestWrite:
    @pytest.mark.asyncio
    async def test_single_statement_with_write_intent(self, story_service, graph):
        await story_service.write(make_collection(3), "tid_1")

        graph.execute.assert_awaited_once()
        graph.read.assert_not_called()
        statement = graph.execute.call_args[0][0]
        assert statement.phases == (PHASE_RELATIONSHIP_CLEANUP, PHASE_NODE_MERGE, PHASE_ITEM_EDGES)
        assert statement.params["uuid"] == CC_UUID
        assert statement.params["props"] == {
            "uuid": CC_UUID,
            "publishReference": "test12345",
            "lastModified": "2016-08-25T06:06:23.532Z",
        }
        assert [item["order"] for item in statement.params["items"]] == [1, 2, 3]
        assert [item["uuid"] for item in statement.params["items"]] == ["Item0", "Item1", "Item2"]

    @pytest.mark.asyncio
    async def test_uses_kind_relation(self, content_service, graph):
        await content_service.write(make_collection(1))
        assert ":CONTAINS" in graph.execute.call_args[0][0].cypher

    @pytest.mark.asyncio
    async def test_failure_is_wrapped_with_phases(self, story_service, graph):
        graph.execute.side_effect = GraphQueryError("unique constraint violation")

        with pytest.raises(TransactionError) as exc_info:
            await story_service.write(make_collection(2), "tid_1")

        error = exc_info.value
        assert error.operation == "write"
        assert error.uuid == CC_UUID
        assert error.phases == (PHASE_RELATIONSHIP_CLEANUP, PHASE_NODE_MERGE, PHASE_ITEM_EDGES)
        assert "relationship cleanup" in str(error)
        assert "unique constraint violation" in str(error)
        assert isinstance(error.__cause__, GraphQueryError)

    @pytest.mark.asyncio
    async def test_store_unavailable_propagates_unchanged(self, story_service, graph):
        graph.execute.side_effect = StoreUnavailableError("down")

        with pytest.raises(StoreUnavailableError):
            await story_service.write(make_collection(1))


class TestDelete:
    @pytest.mark.asyncio
    async def test_deleted_from_mutation_counters(self, story_service, graph):
        graph.execute.return_value = StatementResult(nodes_deleted=1, relationships_deleted=2)

        assert await story_service.delete(CC_UUID, "tid_1") is True
        graph.read.assert_not_called()

    @pytest.mark.asyncio
    async def test_node_kept_when_other_edges_remain(self, story_service, graph):
        graph.execute.return_value = StatementResult(nodes_deleted=0, relationships_deleted=2)

        assert await story_service.delete(CC_UUID) is False

    @pytest.mark.asyncio
    async def test_extra_relation_only_for_configured_kind(self, story_service, content_service, graph):
        await story_service.delete(CC_UUID)
        assert "IS_CURATED_FOR" in graph.execute.call_args[0][0].cypher

        await content_service.delete(CC_UUID)
        assert "IS_CURATED_FOR" not in graph.execute.call_args[0][0].cypher

    @pytest.mark.asyncio
    async def test_failure_is_wrapped(self, content_service, graph):
        graph.execute.side_effect = GraphQueryError("boom")

        with pytest.raises(TransactionError) as exc_info:
            await content_service.delete(CC_UUID)
        assert exc_info.value.operation == "delete"
        assert "extra relation removal" not in str(exc_info.value)


class TestCount:
    @pytest.mark.asyncio
    async def test_count(self, story_service, graph):
        graph.read.return_value = StatementResult(rows=[[3]])
        assert await story_service.count() == 3

    @pytest.mark.asyncio
    async def test_count_without_rows(self, story_service, graph):
        graph.read.return_value = StatementResult(rows=[])
        assert await story_service.count() == 0


class TestInitialiseAndCheck:
    @pytest.mark.asyncio
    async def test_constraints_for_every_label(self, story_service, graph):
        graph.ensure_unique_constraints.return_value = [("StoryPackage", "uuid")]

        created = await story_service.initialise()

        graph.ensure_unique_constraints.assert_awaited_once_with(
            {"ContentCollection": "uuid", "Curation": "uuid", "StoryPackage": "uuid"}
        )
        assert created == [("StoryPackage", "uuid")]

    @pytest.mark.asyncio
    async def test_unsupported_schema_propagates(self, content_service, graph):
        graph.ensure_unique_constraints.side_effect = SchemaUnsupportedError("no constraints")

        with pytest.raises(SchemaUnsupportedError):
            await content_service.initialise()

    @pytest.mark.asyncio
    async def test_check_pings_store(self, story_service, graph):
        await story_service.check()
        graph.ping.assert_awaited_once()


class TestDecode:
    def test_decode_returns_identity(self, story_service):
        collection, uuid = story_service.decode(b'{"uuid": "cc-1", "items": [{"uuid": "a"}]}')
        assert uuid == "cc-1"
        assert collection.item_uuids == ["a"]

    def test_decode_rejects_malformed(self, story_service):
        with pytest.raises(CollectionValidationError):
            story_service.decode(b'{"items": []}')
