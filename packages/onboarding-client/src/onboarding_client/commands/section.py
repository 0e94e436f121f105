import json

from rich.table import Table
import typer

from onboarding_client import sections
from onboarding_client.commands.common import (
    ProjectIdOption,
    console,
    edit_project,
    run,
    with_session,
)
from onboarding_client.sections import SectionValidationError
from shared.contracts.dto.project import ProjectDTO
from shared.onboarding import LIST_KEYS, SECTIONS


async def show_sections_command(project_id: str | None) -> ProjectDTO:
    async def action(session):
        return session.project

    return await with_session(project_id, action)


async def complete_section_command(project_id: str | None, section_id: str) -> ProjectDTO:
    sections.check_section_id(section_id)

    async def action(session):
        return await session.mark_section_completed(section_id)

    return await with_session(project_id, action)


def _added(project: ProjectDTO, key: str) -> None:
    item = project.data[key][-1]
    console.print(f"[bold green]✓ Added to {key}[/bold green] (id: [cyan]{item['id']}[/cyan])")


def _list_key(key: str) -> str:
    if key not in LIST_KEYS:
        raise SectionValidationError(f"{key} is not a list section")
    return key


app = typer.Typer(help="Fill in the onboarding sections")


@app.command("list")
def list_sections(project_id: str | None = ProjectIdOption):
    """Show every section and whether it is completed"""
    project = run(show_sections_command(project_id))

    table = Table(title=f"Project {project.id}")
    table.add_column("", width=2)
    table.add_column("Section", style="cyan")
    table.add_column("Title")
    for section in SECTIONS:
        done = "[green]✓[/green]" if section.id in project.completed_sections else ""
        table.add_row(done, section.id, section.title)
    console.print(table)


@app.command()
def complete(
    section_id: str = typer.Argument(..., help="Section id, see `section list`"),
    project_id: str | None = ProjectIdOption,
):
    """Mark a section as completed"""
    run(complete_section_command(project_id, section_id))
    console.print(f"[bold green]✓ Section {section_id} completed[/bold green]")


@app.command()
def migration(
    field: str = typer.Argument(..., help="Migration field, e.g. arende"),
    value: str = typer.Argument(...),
    project_id: str | None = ProjectIdOption,
):
    """Set one migration answer"""
    run(edit_project(project_id, lambda p: sections.set_migration_field(p, field, value)))
    console.print(f"[bold green]✓ {field} saved[/bold green]")


@app.command("add-group")
def add_group(
    name: str = typer.Option(..., "--name", "-n"),
    description: str = typer.Option("", "--description", "-d"),
    project_id: str | None = ProjectIdOption,
):
    """Add a group"""
    project = run(edit_project(project_id, lambda p: sections.add_group(p, name, description)))
    _added(project, "groups")


@app.command("add-agent")
def add_agent(
    name: str = typer.Option(..., "--name", "-n"),
    email: str = typer.Option(..., "--email", "-e"),
    role: str = typer.Option("", "--role"),
    phone: str = typer.Option("", "--phone"),
    language: str = typer.Option(sections.DEFAULT_LANGUAGE, "--language"),
    timezone: str = typer.Option(sections.DEFAULT_TIMEZONE, "--timezone"),
    groups: list[str] = typer.Option([], "--group", "-g", help="Repeat for several groups"),
    signature: str = typer.Option("", "--signature"),
    project_id: str | None = ProjectIdOption,
):
    """Add an agent"""

    def edit(p: ProjectDTO) -> ProjectDTO:
        return sections.add_agent(
            p,
            name,
            email,
            role=role,
            phone=phone,
            language=language,
            timezone=timezone,
            associated_groups=groups,
            signature=signature,
        )

    _added(run(edit_project(project_id, edit)), "agents")


@app.command("add-email")
def add_email(
    name: str = typer.Option(..., "--name", "-n"),
    email: str = typer.Option(..., "--email", "-e"),
    group: str = typer.Option("", "--group", "-g"),
    project_id: str | None = ProjectIdOption,
):
    """Add an inbound email address"""
    project = run(
        edit_project(project_id, lambda p: sections.add_email_address(p, name, email, group))
    )
    _added(project, "emailAddresses")


@app.command("add-hours")
def add_hours(
    name: str = typer.Option(..., "--name", "-n"),
    weekdays: list[str] = typer.Option(..., "--weekday", "-w", help="Repeat for several days"),
    timezone: str = typer.Option(sections.DEFAULT_TIMEZONE, "--timezone"),
    from_time: str = typer.Option("09:00", "--from"),
    to_time: str = typer.Option("17:00", "--to"),
    group: str = typer.Option("", "--group", "-g"),
    project_id: str | None = ProjectIdOption,
):
    """Add a working hours schedule"""

    def edit(p: ProjectDTO) -> ProjectDTO:
        return sections.add_working_hours(
            p, name, weekdays, timezone=timezone, from_time=from_time, to_time=to_time, group=group
        )

    _added(run(edit_project(project_id, edit)), "workingHours")


@app.command()
def remove(
    key: str = typer.Argument(..., help="List section, e.g. agents"),
    item_id: str = typer.Argument(...),
    project_id: str | None = ProjectIdOption,
):
    """Remove an item from a list section"""
    run(edit_project(project_id, lambda p: sections.remove_item(p, _list_key(key), item_id)))
    console.print(f"[bold green]✓ Removed {item_id} from {key}[/bold green]")


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Top-level document key"),
    value: str = typer.Argument(..., help="JSON value"),
    project_id: str | None = ProjectIdOption,
):
    """Replace a whole section with a JSON value"""

    def edit(p: ProjectDTO) -> ProjectDTO:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as e:
            raise SectionValidationError(f"Value is not valid JSON: {e.msg}") from e
        return sections.set_section(p, key, parsed)

    run(edit_project(project_id, edit))
    console.print(f"[bold green]✓ {key} saved[/bold green]")
