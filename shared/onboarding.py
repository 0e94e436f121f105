"""Onboarding wizard sections and the canonical default project document.

The store keeps the document opaque; these definitions are what both the
server (on create) and the client (on local create and normalization) agree
an empty project looks like.
"""

import copy
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode


@dataclass(frozen=True)
class Section:
    """One step of the onboarding wizard."""

    id: str
    title: str
    description: str


SECTIONS: tuple[Section, ...] = (
    Section("overview", "Översikt", "Introduktion till onboardingprocessen"),
    Section("migration", "Migrering", "Omfattning av datamigrering"),
    Section("email-addresses", "E-postadresser", "Supportadresser och deras grupper"),
    Section("working-hours", "Arbetstider", "Öppettider per grupp och tidszon"),
    Section("agents-groups", "Agenter & grupper", "Supportteamets grupper och agenter"),
    Section("sla", "SLA (Service Level Agreements)", "Servicenivåavtal och svarstider"),
    Section("contact-fields", "Kontaktfält", "Anpassade fält för kontakter"),
    Section("ticket-fields", "Ärendefält", "Anpassade fält för ärenden"),
    Section("ticket-forms", "Ärendeformulär", "Formulär för ärendeskapande"),
    Section("predefined-forms", "Fördefinierade formulär", "Mallar för vanliga ärendetyper"),
    Section("canned-responses", "Fördefinerade svarsmallar", "Svarsmallar i mappar"),
    Section("solution-articles", "Lösningsartiklar", "Kunskapsbas med artiklar"),
    Section("automations", "Automatiseringar", "Regler för automatisk ärendehantering"),
    Section("csat", "CSAT (Customer Satisfaction)", "Kundnöjdhetsundersökningar"),
    Section("portal-settings", "Portalinställningar", "Kundportalens inställningar"),
    Section("integrations", "Integrationer", "Externa systemintegrationer"),
    Section("reports", "Rapporter", "Anpassade rapporter"),
    Section("review-submit", "Granska & Skicka", "Slutlig granskning och inlämning"),
)

SECTION_IDS: tuple[str, ...] = tuple(section.id for section in SECTIONS)

MIGRATION_FIELDS: tuple[str, ...] = (
    "antalAr",
    "arende",
    "bilagorIArenden",
    "kontakter",
    "foretag",
    "agenter",
    "grupper",
    "slaRegler",
    "losningsartiklar",
    "rapporter",
    "anpassningar",
)

LIST_KEYS: tuple[str, ...] = (
    "emailAddresses",
    "workingHours",
    "groups",
    "agents",
    "slaPolicy",
    "contactFields",
    "ticketFields",
    "ticketForms",
    "predefinedForms",
    "cannedResponses",
    "solutionArticles",
    "automations",
    "integrations",
    "reports",
)

_DEFAULT_DOCUMENT: dict[str, Any] = {
    "migrationData": {field: "" for field in MIGRATION_FIELDS},
    **{key: [] for key in LIST_KEYS},
    "csatConfig": {
        "surveyQuestion": "",
        "thankYouMessage": "",
        "sendTrigger": "",
        "choices": [],
    },
    "portalSettings": {
        "defaultLanguage": "sv",
        "supportedLanguages": ["sv"],
        "enableCaptcha": False,
        "allowGuestTickets": True,
        "ticketCreationForGuests": True,
        "displayKnowledgeBase": True,
    },
}

DOCUMENT_KEYS: tuple[str, ...] = tuple(_DEFAULT_DOCUMENT)


def default_document() -> dict[str, Any]:
    """Return a fresh copy of the empty project document."""
    return copy.deepcopy(_DEFAULT_DOCUMENT)


def normalize_document(data: dict[str, Any]) -> dict[str, Any]:
    """Fill in every expected top-level key that is missing or null.

    Keys the client does not know about are kept as they are.
    """
    normalized = dict(data)
    defaults = default_document()
    for key, value in defaults.items():
        if normalized.get(key) is None:
            normalized[key] = value
    return normalized


def build_share_link(base_url: str, project_id: str) -> str:
    """Link that reopens the wizard on ``project_id``."""
    return f"{base_url.rstrip('/')}?{urlencode({'id': project_id})}"
