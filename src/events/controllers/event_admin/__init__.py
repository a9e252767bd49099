"""Event admin controllers package.

This package splits the event admin endpoints into logical groupings.
"""

from .core import EventAdminCoreController
from .registrations import EventAdminRegistrationsController

EVENT_ADMIN_CONTROLLERS: list[type] = [
    EventAdminCoreController,
    EventAdminRegistrationsController,
]

__all__ = [
    "EventAdminCoreController",
    "EventAdminRegistrationsController",
    "EVENT_ADMIN_CONTROLLERS",
]
