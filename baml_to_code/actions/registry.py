"""
In-memory action registry.

Makes synthesized ActionSpecs invocable by name. The registry is filled
once and then only read, so actions can be run concurrently: every call
works on its own copy of the arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..clients.registry import ClientModule
from ..errors import ActionInvocationError
from .spec import ActionSpec

logger = logging.getLogger(__name__)


class ActionRegistry:
    """Runs registered actions against a client module."""

    def __init__(self, client_module: ClientModule, actions: Iterable[ActionSpec] = ()):
        self.client_module = client_module
        self._actions: dict[str, ActionSpec] = {}
        for action in actions:
            self.register(action)

    def register(self, action: ActionSpec) -> bool:
        """Register an action. Returns False if one with the same name already exists."""
        if action.name in self._actions:
            logger.debug("Action %s already registered, keeping the existing one", action.name)
            return False
        self._actions[action.name] = action
        return True

    def get(self, name: str) -> ActionSpec:
        try:
            return self._actions[name]
        except KeyError:
            raise ActionInvocationError(f"Unknown action {name!r}. Available actions: {', '.join(self._actions) or 'none'}") from None

    @property
    def names(self) -> list[str]:
        return list(self._actions)

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def run(self, name: str, arguments: Mapping[str, Any] | None = None) -> Any:
        """
        Run an action.

        Args:
            name: Action name, e.g. ``"extract_tasks"`` or ``"extract_tasks_stream"``
            arguments: Argument values by name. Nullable arguments may be omitted.

        Returns:
            The function result for sync actions, a StreamHandle for stream actions

        Raises:
            ActionInvocationError: If the action is unknown or the arguments are invalid
        """
        action = self.get(name)
        values = self._prepare_arguments(action, arguments or {})
        binding = action.implementation
        return binding.implementation().run(self.client_module, values, binding.options)

    def _prepare_arguments(self, action: ActionSpec, arguments: Mapping[str, Any]) -> dict[str, Any]:
        declared = {a.name for a in action.arguments}
        unexpected = [k for k in arguments if k not in declared]
        if unexpected:
            raise ActionInvocationError(f"Action {action.name} got unexpected arguments: {', '.join(unexpected)}")

        values = {}
        for argument in action.arguments:
            value = arguments.get(argument.name)
            if value is None and not argument.nullable:
                raise ActionInvocationError(f"Action {action.name} requires argument {argument.name!r}")
            values[argument.name] = value
        return values
