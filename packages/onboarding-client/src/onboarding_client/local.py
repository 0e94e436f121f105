"""On-device fallback store for onboarding projects.

Projects are kept as serialized wire documents under
``onboarding_project_{id}`` plus an index entry listing every local id.
The key/value backend is either a directory of JSON files or Redis.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import json
import os
from pathlib import Path
import tempfile
from typing import Any, Protocol
import uuid

import structlog

from shared.config import DEFAULT_SHARE_BASE_URL
from shared.contracts.dto.project import ProjectDTO, ProjectSummaryDTO, utc_now
from shared.errors import InvalidDocumentError, ProjectNotFoundError
from shared.onboarding import build_share_link, default_document

logger = structlog.get_logger(__name__)

PROJECT_KEY_PREFIX = "onboarding_project_"
INDEX_KEY = "onboarding_projects_list"


class KeyValueBackend(Protocol):
    """Subset of the redis.asyncio.Redis API the local store relies on."""

    async def get(self, name: str) -> Any: ...
    async def set(self, name: str, value: str) -> Any: ...
    async def delete(self, *names: str) -> Any: ...


class FileKeyValueStore:
    """Key/value backend keeping one JSON file per key in a directory.

    Values are returned as raw bytes, like redis.asyncio without
    ``decode_responses``. File access runs in a worker thread.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def _read(self, name: str) -> bytes | None:
        path = self._path(name)
        if not path.exists():
            return None
        return path.read_bytes()

    def _write(self, name: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file and rename so readers never see half a record
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, self._path(name))
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _remove(self, names: tuple[str, ...]) -> int:
        removed = 0
        for name in names:
            path = self._path(name)
            if path.exists():
                path.unlink()
                removed += 1
        return removed

    async def get(self, name: str) -> bytes | None:
        return await asyncio.to_thread(self._read, name)

    async def set(self, name: str, value: str) -> bool:
        await asyncio.to_thread(self._write, name, value)
        return True

    async def delete(self, *names: str) -> int:
        return await asyncio.to_thread(self._remove, names)


def _decode(raw: Any) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8")
    return raw


class LocalProjectStore:
    """Project store on the local device."""

    def __init__(self, backend: KeyValueBackend, share_base_url: str = DEFAULT_SHARE_BASE_URL):
        self.backend = backend
        self.share_base_url = share_base_url

    @staticmethod
    def _key(project_id: str) -> str:
        return f"{PROJECT_KEY_PREFIX}{project_id}"

    async def create(self) -> ProjectDTO:
        now = utc_now()
        project = ProjectDTO(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            completed_sections=[],
            data=default_document(),
        )
        await self.save(project)
        logger.info("local_project_created", project_id=project.id)
        return project

    async def get(self, project_id: str) -> ProjectDTO:
        raw = await self.backend.get(self._key(project_id))
        if raw is None:
            raise ProjectNotFoundError(project_id)
        try:
            document = json.loads(_decode(raw))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidDocumentError(project_id, f"local record is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise InvalidDocumentError(project_id, "local record is not a JSON object")
        try:
            return ProjectDTO.from_document(document)
        except ValueError as e:
            raise InvalidDocumentError(project_id, f"local record is malformed: {e}") from e

    async def list(self) -> list[ProjectSummaryDTO]:
        summaries = []
        for project_id in await self.project_ids():
            try:
                project = await self.get(project_id)
            except ProjectNotFoundError:
                logger.warning("local_index_entry_missing", project_id=project_id)
                continue
            summaries.append(project.summary())
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)

    async def save(self, project: ProjectDTO, keys: Iterable[str] | None = None) -> ProjectDTO:
        """Write the whole project; ``keys`` is accepted for interface parity."""
        await self.backend.set(
            self._key(project.id), json.dumps(project.to_document(), ensure_ascii=False)
        )
        ids = await self.project_ids()
        if project.id not in ids:
            ids.append(project.id)
            await self.backend.set(INDEX_KEY, json.dumps(ids))
        logger.debug("local_project_saved", project_id=project.id)
        return project

    async def delete(self, project_id: str) -> None:
        if await self.backend.get(self._key(project_id)) is None:
            raise ProjectNotFoundError(project_id)
        await self.backend.delete(self._key(project_id))
        ids = [pid for pid in await self.project_ids() if pid != project_id]
        await self.backend.set(INDEX_KEY, json.dumps(ids))
        logger.info("local_project_deleted", project_id=project_id)

    async def share(self, project_id: str) -> str:
        return build_share_link(self.share_base_url, project_id)

    async def project_ids(self) -> list[str]:
        raw = await self.backend.get(INDEX_KEY)
        if raw is None:
            return []
        try:
            ids = json.loads(_decode(raw))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("local_index_corrupt", key=INDEX_KEY)
            return []
        if not isinstance(ids, list):
            logger.warning("local_index_corrupt", key=INDEX_KEY, found=type(ids).__name__)
            return []
        return [pid for pid in ids if isinstance(pid, str)]

    async def close(self) -> None:
        close = getattr(self.backend, "aclose", None)
        if close is not None:
            await close()
