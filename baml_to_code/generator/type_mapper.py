"""
Mapping from raw schema type descriptors to the IR, and from the IR to
Python type expressions.

Both directions are total: no descriptor is rejected and every FieldType
has a rendering. Descriptors the mapper does not understand become
UNKNOWN and render as ``typing.Any``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from ..schema import SchemaDefinition
from ..utils import to_snake_case
from .ir_nodes import FieldType, PrimitiveKind, TypeKind

# Primitive tags accepted from schema loaders
PRIMITIVE_ALIASES: dict[str, PrimitiveKind] = {
    "string": PrimitiveKind.STRING,
    "str": PrimitiveKind.STRING,
    "integer": PrimitiveKind.INTEGER,
    "int": PrimitiveKind.INTEGER,
    "float": PrimitiveKind.FLOAT,
    "number": PrimitiveKind.FLOAT,
    "boolean": PrimitiveKind.BOOLEAN,
    "bool": PrimitiveKind.BOOLEAN,
}

# Python rendering of primitive kinds
TYPE_MAP: dict[PrimitiveKind, str] = {
    PrimitiveKind.STRING: "str",
    PrimitiveKind.INTEGER: "int",
    PrimitiveKind.FLOAT: "float",
    PrimitiveKind.BOOLEAN: "bool",
    PrimitiveKind.UNKNOWN: "typing.Any",
}

ANY_TYPE = "typing.Any"


def _tag_of(descriptor: Any) -> str:
    if isinstance(descriptor, str):
        return descriptor
    if isinstance(descriptor, Sequence) and descriptor and isinstance(descriptor[0], str):
        return descriptor[0]
    if descriptor is None:
        return "none"
    return type(descriptor).__name__


def _primitive_kind(tag: Any) -> PrimitiveKind:
    if isinstance(tag, str):
        return PRIMITIVE_ALIASES.get(tag.lower(), PrimitiveKind.UNKNOWN)
    return PrimitiveKind.UNKNOWN


def map_type(descriptor: Any) -> FieldType:
    """Map a raw type descriptor to a FieldType.

    Accepted descriptors are a bare primitive tag (``"string"``) or a
    sequence starting with a tag: ``("primitive", kind[, meta])``,
    ``("optional", T)``, ``("list", T)``, ``("class", name)``,
    ``("enum", name)``. Anything else maps to an UNKNOWN type carrying the
    original tag.

    Args:
        descriptor: The raw descriptor from the schema loader

    Returns:
        The corresponding FieldType, never raises
    """
    if isinstance(descriptor, str):
        if descriptor.lower() in PRIMITIVE_ALIASES:
            return FieldType.primitive(PRIMITIVE_ALIASES[descriptor.lower()])
        return FieldType.unknown(descriptor)

    if not isinstance(descriptor, Sequence) or not descriptor or not isinstance(descriptor[0], str):
        return FieldType.unknown(_tag_of(descriptor))

    tag, args = descriptor[0], descriptor[1:]

    if tag == "primitive":
        return FieldType.primitive(_primitive_kind(args[0] if args else None))
    if tag == "optional" and len(args) == 1:
        return FieldType.optional(map_type(args[0]))
    if tag == "list" and len(args) == 1:
        return FieldType.list_of(map_type(args[0]))
    if tag == "class" and args and isinstance(args[0], str):
        return FieldType.class_ref(args[0])
    if tag == "enum" and args and isinstance(args[0], str):
        return FieldType.enum_ref(args[0])

    return FieldType.unknown(tag)


def descriptor_description(descriptor: Any) -> str | None:
    """Return the description carried by a ``("primitive", kind, meta)`` descriptor."""
    if isinstance(descriptor, Sequence) and not isinstance(descriptor, str) and len(descriptor) == 3 and descriptor[0] == "primitive":
        meta = descriptor[2]
        if isinstance(meta, Mapping):
            return meta.get("description")
    return None


def is_nullable(field_type: FieldType) -> bool:
    return field_type.kind == TypeKind.OPTIONAL


def reference_path(name: str, namespace: str) -> str:
    """Fully-qualified path of the generated class for a schema type name."""
    return f"{namespace}.{to_snake_case(name)}.{name}"


def target_expression(field_type: FieldType, namespace: str | None = None) -> str:
    """Render a FieldType as a Python type expression.

    Args:
        field_type: The type to render
        namespace: Dotted path of the generated types package. When given,
            class and enum references render fully-qualified.

    Returns:
        A non-empty type expression
    """
    if field_type.kind == TypeKind.PRIMITIVE:
        return TYPE_MAP[_primitive_kind(field_type.name)]

    if field_type.kind == TypeKind.OPTIONAL:
        inner = field_type.inner or FieldType.unknown("optional")
        rendered = target_expression(inner, namespace)
        # T | None | None collapses to T | None
        if is_nullable(inner) or rendered == ANY_TYPE:
            return rendered
        return f"{rendered} | None"

    if field_type.kind == TypeKind.LIST:
        inner = field_type.inner or FieldType.unknown("list")
        return f"list[{target_expression(inner, namespace)}]"

    if field_type.is_reference and field_type.name:
        return reference_path(field_type.name, namespace) if namespace else field_type.name

    return ANY_TYPE


def describe(field_type: FieldType) -> str:
    """Describe a FieldType in words, e.g. ``"nullable array of Item"``."""
    if field_type.kind == TypeKind.PRIMITIVE:
        return field_type.name
    if field_type.kind == TypeKind.OPTIONAL:
        return f"nullable {describe(field_type.inner or FieldType.unknown('optional'))}"
    if field_type.kind == TypeKind.LIST:
        return f"array of {describe(field_type.inner or FieldType.unknown('list'))}"
    if field_type.is_reference:
        return field_type.name
    return f"any ({field_type.name})" if field_type.name else "any"


def walk(field_type: FieldType) -> Iterator[FieldType]:
    """Yield a FieldType and every type nested inside it."""
    current: FieldType | None = field_type
    while current is not None:
        yield current
        current = current.inner


def referenced_names(field_type: FieldType) -> list[str]:
    return [t.name for t in walk(field_type) if t.is_reference]


def unknown_tags(field_type: FieldType) -> list[str]:
    """Tags of every part of the type that degraded to ``typing.Any``."""
    tags = []
    for t in walk(field_type):
        if t.kind == TypeKind.UNKNOWN:
            tags.append(t.name)
        elif t.kind == TypeKind.PRIMITIVE and t.name == PrimitiveKind.UNKNOWN.value:
            tags.append("primitive")
    return tags


def uses_any(field_type: FieldType) -> bool:
    return ANY_TYPE in target_expression(field_type)


def find_reference_cycles(schema: SchemaDefinition) -> list[list[str]]:
    """Find cycles in the class-to-class reference graph.

    References are never inlined, so cycles do not break generation; they
    are returned so callers can report them.

    Returns:
        One list of class names per cycle, starting and ending at the same
        class, in discovery order
    """
    graph: dict[str, list[str]] = {}
    for class_def in schema.classes:
        targets = []
        for field_def in class_def.fields:
            for name in referenced_names(map_type(field_def.type)):
                if schema.get_class(name) is not None and name not in targets:
                    targets.append(name)
        graph[class_def.name] = targets

    cycles: list[list[str]] = []
    seen: set[frozenset[str]] = set()
    visited: set[str] = set()

    def visit(node: str, path: list[str]) -> None:
        for target in graph.get(node, []):
            if target in path:
                cycle = path[path.index(target) :] + [target]
                key = frozenset(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            elif target not in visited:
                visit(target, path + [target])
        visited.add(node)

    for name in graph:
        if name not in visited:
            visit(name, [name])

    return cycles
