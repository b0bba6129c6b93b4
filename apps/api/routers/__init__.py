"""Routers package."""

from . import (
    health,
    auth,
    settings,
    social,
    statuses,
    notifications,
    export,
)
