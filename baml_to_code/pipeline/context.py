"""
Build context passed from stage to stage.

The context is immutable: a stage returns a new context instead of
modifying the one it received.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..actions.spec import ActionSpec
from ..clients.registry import ClientModule, ClientModuleRegistry
from ..config import ClientConfig, ResourceDefinition
from ..schema import SchemaDefinition, SchemaLoader


@dataclass(frozen=True)
class BuildContext:
    """Accumulated state of one build."""

    resource: ResourceDefinition
    client_config: ClientConfig = field(default_factory=ClientConfig)
    registry: ClientModuleRegistry = field(default_factory=ClientModuleRegistry)

    # Either a schema, or a loader called with the client module source path
    schema: SchemaDefinition | None = None
    loader: SchemaLoader | None = None

    types_submodule: str = "types"

    # Filled in by stages
    client_module: ClientModule | None = None
    actions: tuple[ActionSpec, ...] = ()
    warnings: tuple[str, ...] = ()
    completed_stages: tuple[str, ...] = ()
