"""
Pipeline - ordered build stages turning a resource definition into actions.

1. validate_client_config: exactly one of client / client_module
2. define_client_modules: resolve or synthesize the client module
3. import_functions: sync + stream actions per imported function
"""

from __future__ import annotations

from ..clients.registry import ClientModuleRegistry
from ..config import ClientConfig, ResourceDefinition
from ..schema import SchemaDefinition, SchemaLoader
from .context import BuildContext
from .orchestrator import Completed, Failed, Pipeline, PipelineResult, Stage
from .stages import DefineClientModules, ImportFunctions, ValidateClientConfig, default_stages


def default_pipeline() -> Pipeline:
    return Pipeline(default_stages())


def build_actions(
    resource: ResourceDefinition,
    client_config: ClientConfig | None = None,
    schema: SchemaDefinition | None = None,
    loader: SchemaLoader | None = None,
    registry: ClientModuleRegistry | None = None,
    types_submodule: str = "types",
) -> BuildContext:
    """
    Run the default pipeline for one resource.

    Returns:
        The final build context, holding the client module and actions

    Raises:
        GenerationError: The error of the first failing stage
    """
    context = BuildContext(
        resource=resource,
        client_config=client_config if client_config is not None else ClientConfig(),
        registry=registry if registry is not None else ClientModuleRegistry(),
        schema=schema,
        loader=loader,
        types_submodule=types_submodule,
    )
    result = default_pipeline().run(context)
    if isinstance(result, Failed):
        result.raise_error()
    return result.context


__all__ = [
    "BuildContext",
    "Completed",
    "DefineClientModules",
    "Failed",
    "ImportFunctions",
    "Pipeline",
    "PipelineResult",
    "Stage",
    "ValidateClientConfig",
    "build_actions",
    "default_pipeline",
    "default_stages",
]
