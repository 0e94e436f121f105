"""Client side of the onboarding wizard: editing, persistence and fallback."""

from .session import ProjectSession

__all__ = ["ProjectSession"]
