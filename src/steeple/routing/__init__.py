"""Routing — the explicit script registry that replaces filesystem dispatch.

Scripts are registered during setup and compiled into an immutable
lookup structure when the controller freezes.
"""

from steeple.routing.registry import ScriptRegistry
from steeple.routing.script import Script

__all__ = ["Script", "ScriptRegistry"]
