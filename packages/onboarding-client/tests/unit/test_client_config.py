from pathlib import Path

from pydantic import ValidationError
import pytest

from onboarding_client.client import get_local_store, get_project_store
from onboarding_client.config import Config
from onboarding_client.local import FileKeyValueStore
from onboarding_client.state import (
    clear_current_project_id,
    read_current_project_id,
    write_current_project_id,
)


class TestConfig:
    def test_load_from_env(self, monkeypatch):
        """Test simple env var loading"""
        monkeypatch.setenv("ONBOARDING_API_URL", "http://test-api:8000/")
        monkeypatch.setenv("ONBOARDING_STATE_DIR", "/tmp/onboarding-state")
        monkeypatch.setenv("ONBOARDING_PROJECT_ID", "p-1")

        config = Config()

        assert config.api_url == "http://test-api:8000"
        assert config.state_dir == Path("/tmp/onboarding-state")
        assert config.project_id == "p-1"

    def test_api_suffix_is_rejected(self, monkeypatch):
        monkeypatch.setenv("ONBOARDING_API_URL", "http://test-api:8000/api")

        with pytest.raises(ValidationError):
            Config()

    def test_defaults(self, monkeypatch):
        for name in ("ONBOARDING_API_URL", "ONBOARDING_LOG_LEVEL", "ONBOARDING_LOCAL_STORE_URL"):
            monkeypatch.delenv(name, raising=False)

        config = Config()

        assert config.api_url == "http://localhost:8000"
        assert config.log_level == "WARNING"
        assert config.local_store_url is None


class TestStoreWiring:
    def test_file_backend_by_default(self, tmp_path):
        config = Config(state_dir=tmp_path, local_store_url=None)

        store = get_local_store(config)

        assert isinstance(store.backend, FileKeyValueStore)
        assert store.backend.directory == tmp_path / "projects"

    def test_redis_backend_when_configured(self, tmp_path):
        config = Config(state_dir=tmp_path, local_store_url="redis://localhost:6379/3")

        store = get_local_store(config)

        assert not isinstance(store.backend, FileKeyValueStore)

    def test_project_store_tries_remote_first(self, tmp_path):
        config = Config(api_url="http://api.test", state_dir=tmp_path)

        store = get_project_store(config)

        assert store.primary.base_url == "http://api.test"
        assert store.fallback.share_base_url == config.share_base_url


class TestCurrentProjectState:
    def test_write_read_clear(self, tmp_path):
        assert read_current_project_id(tmp_path) is None

        write_current_project_id(tmp_path / "nested", "p-1")
        assert read_current_project_id(tmp_path / "nested") == "p-1"

        clear_current_project_id(tmp_path / "nested", "other")
        assert read_current_project_id(tmp_path / "nested") == "p-1"

        clear_current_project_id(tmp_path / "nested", "p-1")
        assert read_current_project_id(tmp_path / "nested") is None
