"""
Action synthesizer.

For each imported schema function, derives a synchronous action and a
streaming action bound to the generated return type.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..errors import ActionSynthesisError
from ..generator.ir_nodes import FieldType
from ..generator.type_mapper import is_nullable, map_type, referenced_names, target_expression, unknown_tags
from ..schema import FunctionDefinition, SchemaDefinition
from ..utils import to_snake_case
from .call_function import CallFunction
from .call_stream import CallFunctionStream
from .spec import STREAM_HANDLE_TYPE, STREAM_SUFFIX, ActionKind, ActionSpec, ArgumentSpec, ImplementationBinding

logger = logging.getLogger(__name__)


def action_name(function_name: str) -> str:
    """``FooBarBaz`` -> ``foo_bar_baz``."""
    return to_snake_case(function_name)


def stream_action_name(function_name: str) -> str:
    """``FooBarBaz`` -> ``foo_bar_baz_stream``."""
    return f"{action_name(function_name)}{STREAM_SUFFIX}"


def synthesize_actions(
    function_names: Iterable[str],
    schema: SchemaDefinition,
    client_module: str,
    telemetry: bool = False,
    types_submodule: str = "types",
    warnings: list[str] | None = None,
) -> list[ActionSpec]:
    """
    Derive a sync and a stream action for every imported function.

    A function imported more than once yields a single pair; the first
    occurrence wins.

    Args:
        function_names: Imported function names, in import order
        schema: Schema declaring the functions
        client_module: Dotted path of the client module; generated types
            live in ``<client_module>.<types_submodule>``
        telemetry: Whether the implementations log call timings
        types_submodule: Name of the generated types subpackage
        warnings: List receiving mapping degradation warnings

    Returns:
        Action specs, sync then stream for each function

    Raises:
        ActionSynthesisError: If a function is not declared in the schema
    """
    namespace = f"{client_module}.{types_submodule}"
    actions: list[ActionSpec] = []
    seen: set[str] = set()

    for function_name in function_names:
        if function_name in seen:
            logger.debug("Function %s already imported, skipping duplicate", function_name)
            continue
        seen.add(function_name)

        function = schema.get_function(function_name)
        if function is None:
            raise ActionSynthesisError(
                f"BAML function {function_name} not found in {client_module}. "
                f"Available functions: {', '.join(schema.function_names) or 'none'}. "
                "Make sure the function is defined in your BAML files."
            )

        actions.extend(_actions_for_function(function, schema, namespace, telemetry, warnings))

    return actions


def _actions_for_function(
    function: FunctionDefinition,
    schema: SchemaDefinition,
    namespace: str,
    telemetry: bool,
    warnings: list[str] | None,
) -> tuple[ActionSpec, ActionSpec]:
    arguments = tuple(_build_argument(function.name, param.name, param.type, param.optional, namespace, warnings) for param in function.params)
    returns = map_type(function.return_type)
    _check_return_type(function.name, returns, schema, warnings)

    return_type = target_expression(returns, namespace)
    description = f"Auto-generated from BAML function {function.name}"

    sync_action = ActionSpec(
        name=action_name(function.name),
        kind=ActionKind.SYNC,
        arguments=arguments,
        returns=returns,
        return_type=return_type,
        implementation=ImplementationBinding(CallFunction, {"function": function.name, "telemetry": telemetry}),
        description=description,
    )
    stream_action = ActionSpec(
        name=stream_action_name(function.name),
        kind=ActionKind.STREAM,
        arguments=arguments,
        returns=returns,
        return_type=f"{STREAM_HANDLE_TYPE}[{return_type}]",
        implementation=ImplementationBinding(
            CallFunctionStream,
            {"function": function.name, "telemetry": telemetry, "element_type": return_type},
        ),
        description=description,
        constraints={"element_type": return_type},
    )
    return sync_action, stream_action


def _build_argument(
    function_name: str,
    name: str,
    descriptor: object,
    optional: bool,
    namespace: str,
    warnings: list[str] | None,
) -> ArgumentSpec:
    arg_type = map_type(descriptor)
    if optional and not is_nullable(arg_type):
        arg_type = FieldType.optional(arg_type)
    for tag in unknown_tags(arg_type):
        _warn(f"Parameter {function_name}.{name} has unsupported type {tag!r}, falling back to typing.Any", warnings)

    return ArgumentSpec(
        name=name,
        type=arg_type,
        nullable=is_nullable(arg_type),
        type_name=target_expression(arg_type, namespace),
    )


def _check_return_type(function_name: str, returns: FieldType, schema: SchemaDefinition, warnings: list[str] | None) -> None:
    for tag in unknown_tags(returns):
        _warn(f"Function {function_name} has unsupported return type {tag!r}, falling back to typing.Any", warnings)
    for name in referenced_names(returns):
        if schema.get_class(name) is None and schema.get_enum(name) is None:
            _warn(f"Function {function_name} returns {name}, which is not declared in the schema and has no generated type", warnings)


def _warn(message: str, warnings: list[str] | None) -> None:
    logger.warning(message)
    if warnings is not None:
        warnings.append(message)
