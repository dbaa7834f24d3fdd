"""
Action specifications.

An ActionSpec describes one callable operation derived from a schema
function: its name, arguments, return type and the implementation that
runs it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..generator.ir_nodes import FieldType

STREAM_SUFFIX = "_stream"

STREAM_HANDLE_TYPE = "baml_to_code.stream.StreamHandle"


class ActionKind(str, Enum):
    SYNC = "sync"
    STREAM = "stream"


@dataclass(frozen=True)
class ArgumentSpec:
    """One action argument, in function parameter order."""

    name: str
    type: FieldType
    nullable: bool = False
    type_name: str = ""  # Rendered Python type expression


@dataclass(frozen=True, eq=False)
class ImplementationBinding:
    """Implementation class running an action, with its options.

    Options always include ``function`` (the schema function name) and
    ``telemetry``.
    """

    implementation: type
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def function(self) -> str:
        return self.options["function"]


@dataclass(frozen=True, eq=False)
class ActionSpec:
    name: str
    kind: ActionKind
    arguments: tuple[ArgumentSpec, ...]
    returns: FieldType  # Declared return type of the function
    return_type: str  # Rendered return annotation of the action
    implementation: ImplementationBinding
    description: str = ""
    constraints: dict[str, Any] = field(default_factory=dict)

    @property
    def function(self) -> str:
        return self.implementation.function

    @property
    def required_arguments(self) -> list[str]:
        return [a.name for a in self.arguments if not a.nullable]
