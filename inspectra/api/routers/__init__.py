"""API routers for inspectra."""

from . import approvals
from . import health
from . import notifications
from . import projects
from . import reports
from . import trips

__all__ = [
    "approvals",
    "health",
    "notifications",
    "projects",
    "reports",
    "trips",
]
