from unittest.mock import AsyncMock

import pytest

from onboarding_client.fallback import FallbackProjectStore
from onboarding_client.local import FileKeyValueStore, LocalProjectStore
from onboarding_client.session import ProjectSession
from shared.contracts.dto.project import ProjectDTO, ProjectStatus, utc_now
from shared.errors import ProjectNotFoundError, StoreUnreachableError
from shared.onboarding import default_document


@pytest.fixture
def local(tmp_path):
    return LocalProjectStore(FileKeyValueStore(tmp_path))


@pytest.fixture
def primary():
    remote = AsyncMock()
    remote.save.side_effect = lambda project, keys=None: project
    return remote


@pytest.fixture
def session(primary, local):
    return ProjectSession(FallbackProjectStore(primary, local))


def remote_project(project_id="p-1", **data) -> ProjectDTO:
    now = utc_now()
    return ProjectDTO(id=project_id, created_at=now, updated_at=now, data=data)


class TestOpen:
    @pytest.mark.asyncio
    async def test_open_without_id_creates(self, session, primary):
        primary.create.return_value = remote_project("new-1", **default_document())

        project = await session.open()

        assert project.id == "new-1"
        assert session.created is True

    @pytest.mark.asyncio
    async def test_open_with_id_loads_and_normalizes(self, session, primary):
        """Partial documents from older wizard versions get every key filled in."""
        primary.get.return_value = remote_project("p-1", agents=[{"id": "a1"}])

        project = await session.open("p-1")

        assert session.created is False
        assert project.data["agents"] == [{"id": "a1"}]
        assert project.data["workingHours"] == []
        assert project.data["migrationData"]["arende"] == ""

    @pytest.mark.asyncio
    async def test_open_unknown_id_does_not_create(self, session, primary):
        primary.get.side_effect = ProjectNotFoundError("ghost")

        with pytest.raises(ProjectNotFoundError):
            await session.open("ghost")
        primary.create.assert_not_called()

    def test_project_before_open_raises(self, session):
        with pytest.raises(RuntimeError):
            _ = session.project


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_persists_only_given_keys(self, session, primary):
        primary.get.return_value = remote_project("p-1", **default_document())
        await session.open("p-1")
        groups = [{"id": "g1", "name": "Support", "description": ""}]

        project = await session.update({"groups": groups})

        assert project.data["groups"] == groups
        saved, keys = primary.save.await_args.args
        assert saved.data["groups"] == groups
        assert list(keys) == ["groups"]

    @pytest.mark.asyncio
    async def test_update_status_and_sections(self, session, primary):
        primary.get.return_value = remote_project("p-1")
        await session.open("p-1")

        project = await session.update(
            {"status": "submitted", "completedSections": ["overview", "overview"]}
        )

        assert project.status == ProjectStatus.SUBMITTED
        assert project.completed_sections == ["overview"]

    @pytest.mark.asyncio
    async def test_commit_of_other_project_is_rejected(self, session, primary):
        primary.get.return_value = remote_project("p-1")
        await session.open("p-1")

        with pytest.raises(ValueError):
            await session.commit(remote_project("p-2"))

    @pytest.mark.asyncio
    async def test_commit_without_changes_does_not_save(self, session, primary):
        primary.get.return_value = remote_project("p-1")
        await session.open("p-1")

        await session.commit(session.project)

        primary.save.assert_not_called()


class TestMarkSectionCompleted:
    @pytest.mark.asyncio
    async def test_marks_once(self, session, primary):
        primary.get.return_value = remote_project("p-1")
        await session.open("p-1")

        await session.mark_section_completed("migration")
        await session.mark_section_completed("migration")

        assert session.project.completed_sections == ["migration"]
        assert primary.save.await_count == 1
        _, keys = primary.save.await_args.args
        assert keys == ["completedSections"]


class TestOffline:
    @pytest.mark.asyncio
    async def test_unreachable_save_is_kept_locally(self, session, primary, local):
        """Edits made while the API is down survive in the local store."""
        primary.get.return_value = remote_project("p-1", **default_document())
        primary.save.side_effect = StoreUnreachableError("connection refused")
        await session.open("p-1")

        await session.update({"reports": [{"id": "r1", "name": "Weekly"}]})

        stored = await local.get("p-1")
        assert stored.data["reports"] == [{"id": "r1", "name": "Weekly"}]

    @pytest.mark.asyncio
    async def test_created_offline_then_reopened(self, session, primary, local):
        primary.create.side_effect = StoreUnreachableError("down")
        created = await session.open()

        primary.get.side_effect = StoreUnreachableError("down")
        reopened = ProjectSession(FallbackProjectStore(primary, local))
        project = await reopened.open(created.id)

        assert project.id == created.id
        assert project.data == default_document()
