import json

from rich.table import Table
import typer

from onboarding_client import sections
from onboarding_client.client import get_config, get_project_store
from onboarding_client.commands.common import (
    ProjectIdOption,
    console,
    edit_project,
    open_session,
    resolve_project_id,
    run,
    with_session,
)
from onboarding_client.state import clear_current_project_id
from shared.contracts.dto.project import ProjectDTO, ProjectSummaryDTO
from shared.onboarding import LIST_KEYS, SECTIONS


async def open_project_command(project_id: str | None, new: bool) -> tuple[ProjectDTO, bool]:
    config = get_config()
    resolved = None if new else resolve_project_id(config, project_id)
    session = await open_session(config, resolved)
    try:
        return session.project, session.created
    finally:
        await session.close()


async def list_projects_command() -> list[ProjectSummaryDTO]:
    store = get_project_store()
    try:
        return await store.list()
    finally:
        await store.close()


async def delete_project_command(project_id: str) -> None:
    config = get_config()
    store = get_project_store(config)
    try:
        await store.delete(project_id)
    finally:
        await store.close()
    clear_current_project_id(config.state_dir, project_id)


async def show_project_command(project_id: str | None) -> ProjectDTO:
    async def action(session):
        return session.project

    return await with_session(project_id, action)


async def share_project_command(project_id: str | None) -> str:
    async def action(session):
        return await session.share()

    return await with_session(project_id, action)


app = typer.Typer(help="Manage onboarding projects")


def _print_overview(project: ProjectDTO) -> None:
    console.print(f"ID: [cyan]{project.id}[/cyan]")
    console.print(f"Status: [magenta]{project.status.value}[/magenta]")
    console.print(f"Updated: {project.updated_at.isoformat()}")
    console.print(f"Completed sections: {len(project.completed_sections)}/{len(SECTIONS)}")


@app.command("open")
def open_project(
    project_id: str | None = ProjectIdOption,
    new: bool = typer.Option(False, "--new", help="Start a new project"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Open a project and make it the current one"""
    project, created = run(open_project_command(project_id, new))

    if json_output:
        typer.echo(json.dumps(project.to_document(), indent=2, ensure_ascii=False))
        return

    if created:
        console.print("[bold green]✓ New project created[/bold green]")
    else:
        console.print("[bold green]✓ Project loaded[/bold green]")
    _print_overview(project)


@app.command()
def show(
    project_id: str | None = ProjectIdOption,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the current project"""
    project = run(show_project_command(project_id))

    if json_output:
        typer.echo(json.dumps(project.to_document(), indent=2, ensure_ascii=False))
        return

    _print_overview(project)
    table = Table(title="Items")
    table.add_column("Section", style="cyan")
    table.add_column("Count", justify="right")
    for key in LIST_KEYS:
        table.add_row(key, str(len(project.data.get(key) or [])))
    console.print(table)


@app.command("list")
def list_projects(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List projects, most recently updated first"""
    projects = run(list_projects_command())

    if json_output:
        payload = [p.model_dump(mode="json", by_alias=True) for p in projects]
        typer.echo(json.dumps(payload, indent=2))
        return

    if not projects:
        console.print("[yellow]No projects found.[/yellow]")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="cyan")
    table.add_column("Status", style="magenta")
    table.add_column("Completed", justify="right")
    table.add_column("Updated", style="green")
    for p in projects:
        table.add_row(
            p.id,
            p.status.value,
            str(len(p.completed_sections)),
            p.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def delete(project_id: str = typer.Argument(..., help="Project id")):
    """Delete a project"""
    run(delete_project_command(project_id))
    console.print(f"[bold green]✓ Project {project_id} deleted[/bold green]")


@app.command()
def share(project_id: str | None = ProjectIdOption):
    """Print a shareable link to the current project"""
    link = run(share_project_command(project_id))
    typer.echo(link)


@app.command()
def status(
    value: str = typer.Argument(..., help="draft, submitted or completed"),
    project_id: str | None = ProjectIdOption,
):
    """Set the project status"""
    project = run(edit_project(project_id, lambda p: sections.set_status(p, value)))
    console.print(f"[bold green]✓ Status set to {project.status.value}[/bold green]")
