"""Extension hooks for custom schema and data rules.

A registry maps a (kind, phase) pair to at most one callable. Schema-phase
hooks are called as ``hook(fragment)`` with the raw schema fragment after the
structural checks for that type passed. Data-phase hooks are called as
``hook(fragment, data)`` after the type check of a datum passed. A hook
rejects by raising; the exception reaches the caller unchanged.

Usage:
    def check_range(fragment, data):
        if data is not None and data < fragment.get('min', data):
            raise ExtensionHookError('value below min')

    register_hook(Kind.NUMBER, Phase.DATA, check_range)
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from concordia.schema import Kind

logger = logging.getLogger(__name__)

Hook = Callable[..., Any]


class Phase(Enum):
    """The point at which a hook runs."""
    SCHEMA = 'schema'
    DATA = 'data'


class HookRegistry:
    """Holds at most one hook per (kind, phase) slot. Not thread-safe."""

    def __init__(self) -> None:
        self._hooks: Dict[Tuple[Kind, Phase], Hook] = {}

    def register(self, kind: Kind, phase: Phase, hook: Optional[Hook]) -> None:
        """Installs a hook, replacing any hook already in the slot.

        Passing None removes the hook.
        """
        if not isinstance(kind, Kind):
            raise TypeError(f"Expected a Kind, got {type(kind).__name__}")
        if not isinstance(phase, Phase):
            raise TypeError(f"Expected a Phase, got {type(phase).__name__}")
        if hook is None:
            self.unregister(kind, phase)
            return
        if not callable(hook):
            raise TypeError(f"Hook for {kind.value}/{phase.value} is not callable")
        if (kind, phase) in self._hooks:
            logger.debug("Replacing %s hook for '%s'", phase.value, kind.value)
        self._hooks[(kind, phase)] = hook

    def unregister(self, kind: Kind, phase: Phase) -> Optional[Hook]:
        """Removes and returns the hook in the slot, if any."""
        return self._hooks.pop((kind, phase), None)

    def get(self, kind: Kind, phase: Phase) -> Optional[Hook]:
        return self._hooks.get((kind, phase))

    def clear(self) -> None:
        self._hooks.clear()

    def run_schema_hook(self, kind: Kind, fragment: Any) -> None:
        hook = self.get(kind, Phase.SCHEMA)
        if hook is not None:
            hook(fragment)

    def run_data_hook(self, kind: Kind, fragment: Any, data: Any) -> None:
        hook = self.get(kind, Phase.DATA)
        if hook is not None:
            hook(fragment, data)

    def __len__(self) -> int:
        return len(self._hooks)


# Process-wide registry used when a schema is compiled without an explicit one
default_registry = HookRegistry()


def register_hook(kind: Kind, phase: Phase, hook: Optional[Hook]) -> None:
    """Installs a hook in the process-wide registry."""
    default_registry.register(kind, phase, hook)


def unregister_hook(kind: Kind, phase: Phase) -> Optional[Hook]:
    """Removes a hook from the process-wide registry."""
    return default_registry.unregister(kind, phase)
