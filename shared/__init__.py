"""Shared utilities for the onboarding API and client."""

from .onboarding import SECTIONS, default_document

# DTOs are imported from the shared.contracts submodule
# Example: from shared.contracts.dto.project import ProjectDTO

__all__ = ["SECTIONS", "default_document"]
