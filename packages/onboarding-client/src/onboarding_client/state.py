"""Remembers which project the CLI is working on between invocations."""

from pathlib import Path

CURRENT_PROJECT_FILE = "current_project"


def read_current_project_id(state_dir: Path) -> str | None:
    path = Path(state_dir) / CURRENT_PROJECT_FILE
    if not path.exists():
        return None
    value = path.read_text(encoding="utf-8").strip()
    return value or None


def write_current_project_id(state_dir: Path, project_id: str) -> None:
    state_dir = Path(state_dir)
    state_dir.mkdir(parents=True, exist_ok=True)
    (state_dir / CURRENT_PROJECT_FILE).write_text(project_id + "\n", encoding="utf-8")


def clear_current_project_id(state_dir: Path, project_id: str | None = None) -> None:
    """Forget the current project; with ``project_id``, only if it is that one."""
    path = Path(state_dir) / CURRENT_PROJECT_FILE
    if project_id is not None and read_current_project_id(state_dir) != project_id:
        return
    path.unlink(missing_ok=True)
