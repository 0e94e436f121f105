from datetime import UTC, datetime

import pytest

from onboarding_client import sections
from onboarding_client.sections import SectionValidationError
from shared.contracts.dto.project import ProjectDTO, ProjectStatus
from shared.onboarding import default_document


@pytest.fixture
def project() -> ProjectDTO:
    created = datetime(2024, 5, 1, 8, tzinfo=UTC)
    return ProjectDTO(id="p-1", created_at=created, updated_at=created, data=default_document())


class TestApplyUpdates:
    def test_does_not_mutate_input(self, project):
        updated = sections.apply_updates(project, {"groups": [{"id": "g1"}]})

        assert project.data["groups"] == []
        assert updated.data["groups"] == [{"id": "g1"}]
        assert updated.updated_at > project.updated_at
        assert updated.created_at == project.created_at

    def test_control_keys_go_to_envelope(self, project):
        updated = sections.apply_updates(
            project,
            {"status": "completed", "completedSections": ["csat", "csat", "sla"], "id": "x"},
        )

        assert updated.status == ProjectStatus.COMPLETED
        assert updated.completed_sections == ["csat", "sla"]
        assert updated.id == "p-1"
        assert "status" not in updated.data
        assert "id" not in updated.data

    def test_blank_status_is_ignored(self, project):
        updated = sections.apply_updates(project, {"status": ""})
        assert updated.status == ProjectStatus.DRAFT


class TestChangedKeys:
    def test_reports_changed_document_and_envelope_keys(self, project):
        after = sections.apply_updates(
            project, {"agents": [{"id": "a1"}], "completedSections": ["overview"]}
        )

        assert sections.changed_keys(project, after) == ["agents", "completedSections"]

    def test_nothing_changed(self, project):
        assert sections.changed_keys(project, project) == []


class TestMarkSectionCompleted:
    def test_appends_in_order(self, project):
        once = sections.mark_section_completed(project, "sla")
        twice = sections.mark_section_completed(once, "overview")
        assert twice.completed_sections == ["sla", "overview"]

    def test_already_completed_returns_same_project(self, project):
        once = sections.mark_section_completed(project, "sla")
        assert sections.mark_section_completed(once, "sla") is once

    def test_unknown_section(self, project):
        with pytest.raises(SectionValidationError):
            sections.mark_section_completed(project, "billing")


class TestSetters:
    def test_set_status(self, project):
        assert sections.set_status(project, "submitted").status == ProjectStatus.SUBMITTED

    def test_set_invalid_status(self, project):
        with pytest.raises(SectionValidationError, match="draft, submitted, completed"):
            sections.set_status(project, "archived")

    def test_set_migration_field_keeps_other_fields(self, project):
        first = sections.set_migration_field(project, "arende", "12000")
        second = sections.set_migration_field(first, "antalAr", "3")

        assert second.data["migrationData"]["arende"] == "12000"
        assert second.data["migrationData"]["antalAr"] == "3"

    def test_set_unknown_migration_field(self, project):
        with pytest.raises(SectionValidationError):
            sections.set_migration_field(project, "favouriteColour", "blue")

    def test_set_section_replaces_value(self, project):
        portal = {"defaultLanguage": "en", "supportedLanguages": ["en"]}
        updated = sections.set_section(project, "portalSettings", portal)
        assert updated.data["portalSettings"] == portal

    def test_set_unknown_section_key(self, project):
        with pytest.raises(SectionValidationError):
            sections.set_section(project, "status", "completed")


class TestListSections:
    def test_add_group(self, project):
        updated = sections.add_group(project, "Support", "First line")

        group = updated.data["groups"][0]
        assert group["name"] == "Support"
        assert group["description"] == "First line"
        assert len(group["id"]) == 9  # noqa: PLR2004

    def test_add_group_requires_name(self, project):
        with pytest.raises(SectionValidationError):
            sections.add_group(project, "")

    def test_add_agent_defaults(self, project):
        updated = sections.add_agent(
            project, "Anna", "anna@example.com", associated_groups=["g1", "g1", "g2"]
        )

        agent = updated.data["agents"][0]
        assert agent["language"] == "sv"
        assert agent["timezone"] == "Europe/Stockholm"
        assert agent["associatedGroups"] == ["g1", "g2"]

    def test_add_agent_requires_email(self, project):
        with pytest.raises(SectionValidationError):
            sections.add_agent(project, "Anna", "")

    def test_add_email_address(self, project):
        updated = sections.add_email_address(project, "Support", "support@example.com", "g1")

        assert updated.data["emailAddresses"][0]["associatedGroup"] == "g1"

    def test_add_email_address_rejects_malformed(self, project):
        with pytest.raises(SectionValidationError):
            sections.add_email_address(project, "Support", "not-an-email")

    def test_add_working_hours(self, project):
        updated = sections.add_working_hours(
            project, "Office", ["Måndag", "Tisdag", "Måndag"], from_time="08:00"
        )

        hours = updated.data["workingHours"][0]
        assert hours["weekdays"] == ["Måndag", "Tisdag"]
        assert hours["fromTime"] == "08:00"
        assert hours["toTime"] == "17:00"

    def test_add_working_hours_requires_weekday(self, project):
        with pytest.raises(SectionValidationError):
            sections.add_working_hours(project, "Office", [])

    def test_items_get_distinct_ids(self, project):
        updated = sections.add_group(sections.add_group(project, "A"), "B")
        ids = [group["id"] for group in updated.data["groups"]]
        assert len(set(ids)) == 2  # noqa: PLR2004

    def test_update_item(self, project):
        with_group = sections.add_group(project, "Support")
        group_id = with_group.data["groups"][0]["id"]

        updated = sections.update_item(with_group, "groups", group_id, name="Billing")

        assert updated.data["groups"][0] == {"id": group_id, "name": "Billing", "description": ""}

    def test_remove_item(self, project):
        with_groups = sections.add_group(sections.add_group(project, "A"), "B")
        first_id = with_groups.data["groups"][0]["id"]

        updated = sections.remove_item(with_groups, "groups", first_id)

        assert [g["name"] for g in updated.data["groups"]] == ["B"]

    def test_remove_unknown_item(self, project):
        with pytest.raises(SectionValidationError):
            sections.remove_item(project, "groups", "nope")
