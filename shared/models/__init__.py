"""Database models package."""

from .base import Base
from .project import Project

__all__ = ["Base", "Project"]
