"""Helpers shared by the CLI command groups."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from rich.console import Console
import typer

from onboarding_client.client import get_config, get_session
from onboarding_client.config import Config
from onboarding_client.sections import SectionValidationError
from onboarding_client.session import ProjectSession
from onboarding_client.state import read_current_project_id, write_current_project_id
from shared.contracts.dto.project import ProjectDTO
from shared.errors import InvalidDocumentError, ProjectNotFoundError, ProjectStoreError

T = TypeVar("T")

console = Console()
err_console = Console(stderr=True)

ProjectIdOption = typer.Option(
    None, "--id", help="Project id (defaults to ONBOARDING_PROJECT_ID or the current project)"
)


def resolve_project_id(config: Config, explicit: str | None) -> str | None:
    return explicit or config.project_id or read_current_project_id(config.state_dir)


async def open_session(config: Config, project_id: str | None) -> ProjectSession:
    """Open (or create) the project and remember it as the current one."""
    session = get_session(config)
    try:
        await session.open(project_id)
    except BaseException:
        await session.close()
        raise
    write_current_project_id(config.state_dir, session.project.id)
    return session


async def with_session(
    project_id: str | None, action: Callable[[ProjectSession], Awaitable[T]]
) -> T:
    config = get_config()
    session = await open_session(config, resolve_project_id(config, project_id))
    try:
        return await action(session)
    finally:
        await session.close()


async def edit_project(
    project_id: str | None, edit: Callable[[ProjectDTO], ProjectDTO]
) -> ProjectDTO:
    """Apply a pure edit to the current project and persist what changed."""

    async def action(session: ProjectSession) -> ProjectDTO:
        # Validation happens inside edit(), before anything is written
        return await session.commit(edit(session.project))

    return await with_session(project_id, action)


def run(coro: Awaitable[T]) -> T:
    """Run a command coroutine, turning store failures into CLI errors."""
    try:
        return asyncio.run(coro)
    except SectionValidationError as e:
        err_console.print(f"[bold red]Invalid input:[/bold red] {e}")
        raise typer.Exit(code=2) from None
    except ProjectNotFoundError as e:
        err_console.print(f"[bold red]Failed to load project {e.project_id}.[/bold red]")
        err_console.print("Check the id and retry, or run: onboarding project open --new")
        raise typer.Exit(code=1) from None
    except InvalidDocumentError as e:
        err_console.print(f"[bold red]Project data is corrupt:[/bold red] {e}")
        raise typer.Exit(code=1) from None
    except ProjectStoreError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        err_console.print("Please retry in a moment.")
        raise typer.Exit(code=1) from None
