"""Pure edits of an onboarding project.

Every function takes the current ProjectDTO and returns a new one; the input
is never mutated. Required-field checks raise SectionValidationError before
anything reaches a store.
"""

from collections.abc import Iterable
import re
from typing import Any
import uuid

from shared.contracts.dto.project import (
    CONTROL_KEYS,
    IMMUTABLE_KEYS,
    ProjectDTO,
    ProjectStatus,
    unique_sections,
    utc_now,
)
from shared.onboarding import DOCUMENT_KEYS, MIGRATION_FIELDS, SECTION_IDS

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_LANGUAGE = "sv"
DEFAULT_TIMEZONE = "Europe/Stockholm"

WEEKDAYS = ("Måndag", "Tisdag", "Onsdag", "Torsdag", "Fredag", "Lördag", "Söndag")


class SectionValidationError(ValueError):
    """User input is missing required fields or is malformed."""

    pass


def new_item_id() -> str:
    return uuid.uuid4().hex[:9]


def apply_updates(project: ProjectDTO, updates: dict[str, Any]) -> ProjectDTO:
    """Apply a partial update the same way the store merges it.

    ``completedSections`` and ``status`` replace the envelope values (a blank
    status is ignored); every other key replaces the document key of the same
    name. Envelope identity keys are ignored.
    """
    overlay = {
        key: value
        for key, value in updates.items()
        if key not in CONTROL_KEYS and key not in IMMUTABLE_KEYS
    }
    changes: dict[str, Any] = {"data": {**project.data, **overlay}, "updated_at": utc_now()}
    if updates.get("completedSections") is not None:
        changes["completed_sections"] = unique_sections(list(updates["completedSections"]))
    if updates.get("status"):
        changes["status"] = ProjectStatus(updates["status"])
    return project.model_copy(update=changes)


def changed_keys(before: ProjectDTO, after: ProjectDTO) -> list[str]:
    """Top-level wire keys whose value differs between two versions of a project."""
    keys = [
        key
        for key in dict.fromkeys([*before.data, *after.data])
        if before.data.get(key) != after.data.get(key)
    ]
    if before.completed_sections != after.completed_sections:
        keys.append("completedSections")
    if before.status != after.status:
        keys.append("status")
    return keys


def check_section_id(section_id: str) -> str:
    if section_id not in SECTION_IDS:
        raise SectionValidationError(f"Unknown section: {section_id}")
    return section_id


def mark_section_completed(project: ProjectDTO, section_id: str) -> ProjectDTO:
    """Add ``section_id`` to completedSections; same object back if already there."""
    check_section_id(section_id)
    if section_id in project.completed_sections:
        return project
    return apply_updates(
        project, {"completedSections": [*project.completed_sections, section_id]}
    )


def set_status(project: ProjectDTO, status: str) -> ProjectDTO:
    try:
        value = ProjectStatus(status)
    except ValueError as e:
        choices = ", ".join(s.value for s in ProjectStatus)
        raise SectionValidationError(f"Status must be one of: {choices}") from e
    return apply_updates(project, {"status": value.value})


def set_section(project: ProjectDTO, key: str, value: Any) -> ProjectDTO:
    """Replace one top-level document key wholesale."""
    if key not in DOCUMENT_KEYS:
        raise SectionValidationError(f"Unknown document key: {key}")
    return apply_updates(project, {key: value})


def set_migration_field(project: ProjectDTO, field: str, value: str) -> ProjectDTO:
    if field not in MIGRATION_FIELDS:
        raise SectionValidationError(f"Unknown migration field: {field}")
    migration = {**project.data.get("migrationData", {}), field: value}
    return apply_updates(project, {"migrationData": migration})


def _append(project: ProjectDTO, key: str, item: dict[str, Any]) -> ProjectDTO:
    items = list(project.data.get(key) or [])
    return apply_updates(project, {key: [*items, item]})


def add_group(project: ProjectDTO, name: str, description: str = "") -> ProjectDTO:
    if not name:
        raise SectionValidationError("Group name is required")
    group = {"id": new_item_id(), "name": name, "description": description}
    return _append(project, "groups", group)


def add_agent(
    project: ProjectDTO,
    name: str,
    email: str,
    role: str = "",
    phone: str = "",
    language: str = DEFAULT_LANGUAGE,
    timezone: str = DEFAULT_TIMEZONE,
    associated_groups: Iterable[str] = (),
    signature: str = "",
) -> ProjectDTO:
    if not name or not email:
        raise SectionValidationError("Agent name and email are required")
    agent = {
        "id": new_item_id(),
        "name": name,
        "email": email,
        "role": role,
        "phone": phone,
        "language": language,
        "timezone": timezone,
        "associatedGroups": list(dict.fromkeys(associated_groups)),
        "signature": signature,
    }
    return _append(project, "agents", agent)


def add_email_address(
    project: ProjectDTO, name: str, email: str, associated_group: str = ""
) -> ProjectDTO:
    if not name or not email:
        raise SectionValidationError("Name and email address are required")
    if not EMAIL_PATTERN.match(email):
        raise SectionValidationError(f"Not a valid email address: {email}")
    item = {"id": new_item_id(), "name": name, "email": email, "associatedGroup": associated_group}
    return _append(project, "emailAddresses", item)


def add_working_hours(
    project: ProjectDTO,
    name: str,
    weekdays: Iterable[str],
    timezone: str = DEFAULT_TIMEZONE,
    from_time: str = "09:00",
    to_time: str = "17:00",
    group: str = "",
) -> ProjectDTO:
    days = list(dict.fromkeys(weekdays))
    if not name or not days:
        raise SectionValidationError("Name and at least one weekday are required")
    item = {
        "id": new_item_id(),
        "timezone": timezone,
        "name": name,
        "weekdays": days,
        "fromTime": from_time,
        "toTime": to_time,
        "group": group,
    }
    return _append(project, "workingHours", item)


def update_item(project: ProjectDTO, key: str, item_id: str, **fields: Any) -> ProjectDTO:
    """Change fields of one item in a list section, matched by id."""
    items = project.data.get(key) or []
    if not any(item.get("id") == item_id for item in items):
        raise SectionValidationError(f"No item {item_id} in {key}")
    updated = [{**item, **fields} if item.get("id") == item_id else item for item in items]
    return apply_updates(project, {key: updated})


def remove_item(project: ProjectDTO, key: str, item_id: str) -> ProjectDTO:
    items = project.data.get(key) or []
    remaining = [item for item in items if item.get("id") != item_id]
    if len(remaining) == len(items):
        raise SectionValidationError(f"No item {item_id} in {key}")
    return apply_updates(project, {key: remaining})
