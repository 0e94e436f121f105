import json
import typing

from fakeredis import FakeAsyncRedis, FakeServer
import pytest

from onboarding_client.local import (
    INDEX_KEY,
    PROJECT_KEY_PREFIX,
    FileKeyValueStore,
    LocalProjectStore,
)
from shared.errors import InvalidDocumentError, ProjectNotFoundError
from shared.onboarding import default_document


@pytest.fixture(params=["file", "redis"])
def backend(request, tmp_path):
    if request.param == "file":
        return FileKeyValueStore(tmp_path / "projects")
    return FakeAsyncRedis(server=FakeServer())


@pytest.fixture
def store(backend):
    return LocalProjectStore(backend, share_base_url="https://wizard.example.com")


async def write_raw(backend, name, payload: bytes):
    if isinstance(backend, FileKeyValueStore):
        backend.directory.mkdir(parents=True, exist_ok=True)
        (backend.directory / f"{name}.json").write_bytes(payload)
    else:
        await backend.set(name, payload)


class TestLocalProjectStore:
    @pytest.mark.asyncio
    async def test_create_persists_default_project(self, store, backend):
        project = await store.create()

        assert project.data == default_document()
        assert await store.project_ids() == [project.id]
        raw = await backend.get(f"{PROJECT_KEY_PREFIX}{project.id}")
        assert raw is not None

    @pytest.mark.asyncio
    async def test_get_round_trips_saved_project(self, store):
        project = await store.create()
        edited = project.model_copy(
            update={"data": {**project.data, "groups": [{"id": "g1", "name": "Support"}]}}
        )
        await store.save(edited)

        loaded = await store.get(project.id)

        assert loaded.data["groups"] == [{"id": "g1", "name": "Support"}]
        assert loaded.created_at == project.created_at

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, store):
        with pytest.raises(ProjectNotFoundError):
            await store.get("nope")

    @pytest.mark.asyncio
    async def test_corrupt_record_raises_invalid_document(self, store, backend):
        await backend.set(f"{PROJECT_KEY_PREFIX}broken", "{not json")

        with pytest.raises(InvalidDocumentError):
            await store.get("broken")

    @pytest.mark.asyncio
    async def test_record_without_envelope_raises_invalid_document(self, store, backend):
        await backend.set(f"{PROJECT_KEY_PREFIX}bare", json.dumps({"agents": []}))

        with pytest.raises(InvalidDocumentError):
            await store.get("bare")

    @pytest.mark.asyncio
    async def test_save_does_not_duplicate_index_entries(self, store):
        project = await store.create()
        await store.save(project)
        await store.save(project)

        assert await store.project_ids() == [project.id]

    @pytest.mark.asyncio
    async def test_list_most_recent_first(self, store):
        older = await store.create()
        newer = await store.create()
        touched = older.model_copy(update={"updated_at": newer.updated_at.replace(year=2100)})
        await store.save(touched)

        summaries = await store.list()

        assert [s.id for s in summaries] == [older.id, newer.id]

    @pytest.mark.asyncio
    async def test_list_skips_dangling_index_entries(self, store, backend):
        project = await store.create()
        await backend.set(INDEX_KEY, json.dumps([project.id, "gone"]))

        summaries = await store.list()

        assert [s.id for s in summaries] == [project.id]

    @pytest.mark.asyncio
    async def test_corrupt_index_lists_nothing(self, store, backend):
        await store.create()
        await backend.set(INDEX_KEY, "not json")

        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_undecodable_record_raises_invalid_document(self, store, backend):
        await write_raw(backend, f"{PROJECT_KEY_PREFIX}abc", b"\xff\xfe{")

        with pytest.raises(InvalidDocumentError):
            await store.get("abc")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("index", ["5", "null", '{"ids": []}'])
    async def test_index_that_is_not_a_list_lists_nothing(self, store, backend, index):
        await backend.set(INDEX_KEY, index)

        assert await store.project_ids() == []
        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_save_repairs_index_that_is_not_a_list(self, store, backend):
        await backend.set(INDEX_KEY, "5")

        project = await store.create()

        assert await store.project_ids() == [project.id]

    @pytest.mark.asyncio
    async def test_undecodable_index_lists_nothing(self, store, backend):
        await write_raw(backend, INDEX_KEY, b"\xff\xfe[")

        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_index_entry(self, store):
        keep = await store.create()
        drop = await store.create()

        await store.delete(drop.id)

        assert await store.project_ids() == [keep.id]
        with pytest.raises(ProjectNotFoundError):
            await store.get(drop.id)

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, store):
        with pytest.raises(ProjectNotFoundError):
            await store.delete("nope")

    @pytest.mark.asyncio
    async def test_share_builds_link_without_network(self, store):
        assert await store.share("p-1") == "https://wizard.example.com?id=p-1"


class TestFileKeyValueStore:
    @pytest.mark.asyncio
    async def test_set_get_delete(self, tmp_path):
        kv = FileKeyValueStore(tmp_path / "kv")

        assert await kv.get("missing") is None
        await kv.set("key", "value")
        assert await kv.get("key") == b"value"
        assert await kv.delete("key", "missing") == 1
        assert await kv.get("key") is None

    @pytest.mark.asyncio
    async def test_set_leaves_no_temp_files(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)

        await kv.set("key", "one")
        await kv.set("key", "two")

        assert [p.name for p in tmp_path.iterdir()] == ["key.json"]
        assert await kv.get("key") == b"two"


def test_store_annotations_resolve_to_builtins():
    """Method names like ``list`` must not leak into other signatures."""
    hints = typing.get_type_hints(LocalProjectStore.project_ids)

    assert hints["return"] == list[str]
