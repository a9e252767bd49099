# src/events/admin/__init__.py
"""Events admin module.

Django autodiscover will import this module, which triggers registration
of all admin classes via the @admin.register decorators in submodules.
"""

from events.admin.event import EventAdmin
from events.admin.registration import RegistrationAdmin, TeamAdmin

__all__ = ["EventAdmin", "RegistrationAdmin", "TeamAdmin"]
