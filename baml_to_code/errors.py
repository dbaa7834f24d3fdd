"""
Exceptions raised while generating types and actions from BAML schemas.

Schema mapping degradations are not exceptions: unmappable types fall back
to ``typing.Any`` and are reported as warnings.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for all fatal generation errors."""


class ConfigError(GenerationError):
    """The client configuration of a resource is invalid."""


class IdentifierError(ConfigError):
    """A client identifier does not follow the naming rule."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"Invalid client identifier {identifier!r}. Identifiers must start with a lowercase letter and contain only lowercase letters, digits and underscores."
        )


class ModuleSynthesisError(GenerationError):
    """A client module could not be created or found."""


class PipelineOrderError(GenerationError):
    """Stage ordering constraints cannot be satisfied."""

    def __init__(self, stage_names: list[str]):
        self.stage_names = stage_names
        super().__init__(f"Pipeline stages have cyclic ordering constraints: {', '.join(stage_names)}")


class ActionSynthesisError(GenerationError):
    """An imported function cannot be turned into actions."""


class ActionInvocationError(GenerationError):
    """A synthesized action was invoked with invalid input."""


class BackendNotConfiguredError(GenerationError):
    """A client module was invoked without a backend client."""


class StreamClosedError(GenerationError):
    """A stream was pulled after it had been released."""
