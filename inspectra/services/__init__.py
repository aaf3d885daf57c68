"""Application services for inspectra."""

from .notifications import NotificationService
from .projects import ProjectService

__all__ = ["NotificationService", "ProjectService"]
