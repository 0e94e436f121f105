import redis.asyncio as redis

from onboarding_client.config import Config
from onboarding_client.fallback import FallbackProjectStore
from onboarding_client.local import FileKeyValueStore, LocalProjectStore
from onboarding_client.remote import RemoteProjectStore
from onboarding_client.session import ProjectSession

LOCAL_PROJECTS_DIR = "projects"


def get_config() -> Config:
    return Config()


def get_remote_store(config: Config) -> RemoteProjectStore:
    return RemoteProjectStore(config.api_url, timeout=config.request_timeout)


def get_local_store(config: Config) -> LocalProjectStore:
    if config.local_store_url:
        backend = redis.from_url(config.local_store_url, decode_responses=True)
    else:
        backend = FileKeyValueStore(config.state_dir / LOCAL_PROJECTS_DIR)
    return LocalProjectStore(backend, share_base_url=config.share_base_url)


def get_project_store(config: Config | None = None) -> FallbackProjectStore:
    config = config or get_config()
    return FallbackProjectStore(get_remote_store(config), get_local_store(config))


def get_session(config: Config | None = None) -> ProjectSession:
    return ProjectSession(get_project_store(config))
