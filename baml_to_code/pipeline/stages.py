"""
Build stages.

validate_client_config -> define_client_modules -> import_functions
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..actions.synthesizer import synthesize_actions
from ..clients.registry import ClientModule
from ..clients.resolver import validate_client_selection
from ..errors import ActionSynthesisError, ModuleSynthesisError
from .context import BuildContext
from .orchestrator import Stage

logger = logging.getLogger(__name__)

VALIDATE_CLIENT_CONFIG = "validate_client_config"
DEFINE_CLIENT_MODULES = "define_client_modules"
IMPORT_FUNCTIONS = "import_functions"


class ValidateClientConfig(Stage):
    """Checks that a resource selects its client in exactly one way."""

    name = VALIDATE_CLIENT_CONFIG

    def before(self, other: Stage) -> bool:
        return other.name in (DEFINE_CLIENT_MODULES, IMPORT_FUNCTIONS)

    def run(self, context: BuildContext) -> BuildContext:
        validate_client_selection(context.resource)
        return context


class DefineClientModules(Stage):
    """Resolves the resource's client module, synthesizing it from config when needed.

    Must run before ImportFunctions so the module is available.
    """

    name = DEFINE_CLIENT_MODULES

    def before(self, other: Stage) -> bool:
        return other.name == IMPORT_FUNCTIONS

    def run(self, context: BuildContext) -> BuildContext:
        resource = context.resource

        if resource.client:
            module = context.registry.synthesize(resource.client, context.client_config)
        elif resource.client_module in context.registry:
            module = context.registry.get(resource.client_module)
        elif context.schema is not None:
            # Explicit module with an in-memory schema: bind it without a backend
            module = context.registry.register(ClientModule(name=resource.client_module, source_path=""))
        else:
            module = context.registry.get(resource.client_module)

        logger.debug("Resource %s uses client module %s", resource.name, module.name)
        return replace(context, client_module=module)


class ImportFunctions(Stage):
    """Synthesizes a sync and a stream action for every imported function."""

    name = IMPORT_FUNCTIONS

    def run(self, context: BuildContext) -> BuildContext:
        resource = context.resource
        if context.client_module is None or not resource.import_functions:
            return context

        schema = context.schema if context.schema is not None else self._load_schema(context)
        warnings: list[str] = []
        actions = synthesize_actions(
            resource.import_functions,
            schema,
            context.client_module.name,
            telemetry=resource.telemetry,
            types_submodule=context.types_submodule,
            warnings=warnings,
        )
        logger.info("Imported %d functions into %s as %d actions", len(actions) // 2, resource.name, len(actions))
        return replace(
            context,
            schema=schema,
            actions=context.actions + tuple(actions),
            warnings=context.warnings + tuple(warnings),
        )

    def _load_schema(self, context: BuildContext):
        module = context.client_module
        if context.loader is None or not module.source_path:
            raise ModuleSynthesisError(f"No schema available for client module {module.name}: provide a schema or a loader and a source path")
        try:
            return context.loader(module.source_path)
        except (OSError, ValueError) as e:
            raise ActionSynthesisError(f"Failed to load BAML schema from {module.source_path}: {e}") from e


def default_stages() -> list[Stage]:
    return [ValidateClientConfig(), DefineClientModules(), ImportFunctions()]
