"""
Schema definitions consumed by the generator.

A SchemaDefinition is what a schema loader returns for one BAML source
location: the classes, enums and functions it declares, in declaration
order. Definitions are immutable once loaded.

Raw type descriptors are kept exactly as the loader produced them and are
only interpreted by the type mapper.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "unknown"


@dataclass(frozen=True)
class FieldDefinition:
    """A field of a schema class."""

    name: str
    type: Any
    optional: bool = False
    description: str | None = None


@dataclass(frozen=True)
class ClassDefinition:
    name: str
    fields: tuple[FieldDefinition, ...] = ()


@dataclass(frozen=True)
class EnumDefinition:
    name: str
    variants: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParamDefinition:
    """A parameter of a schema function."""

    name: str
    type: Any
    optional: bool = False


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    params: tuple[ParamDefinition, ...] = ()
    return_type: Any = None


@dataclass(frozen=True)
class SchemaDefinition:
    """Everything declared by one schema source."""

    classes: tuple[ClassDefinition, ...] = ()
    enums: tuple[EnumDefinition, ...] = ()
    functions: tuple[FunctionDefinition, ...] = ()
    source: str = UNKNOWN_SOURCE

    def get_class(self, name: str) -> ClassDefinition | None:
        return next((c for c in self.classes if c.name == name), None)

    def get_enum(self, name: str) -> EnumDefinition | None:
        return next((e for e in self.enums if e.name == name), None)

    def get_function(self, name: str) -> FunctionDefinition | None:
        return next((f for f in self.functions if f.name == name), None)

    @property
    def function_names(self) -> list[str]:
        return [f.name for f in self.functions]

    @staticmethod
    def from_dict(d: Mapping[str, Any], source: str = UNKNOWN_SOURCE) -> SchemaDefinition:
        """Build a schema from a parsed JSON dump.

        Class fields and function params may be given either as a list of
        objects with a ``name`` key or as an ordered ``{name: descriptor}``
        mapping.
        """
        classes = tuple(
            ClassDefinition(name=name, fields=tuple(_parse_fields(_members(class_def, "fields"))))
            for name, class_def in _section(d, "classes").items()
        )
        enums = tuple(
            EnumDefinition(name=name, variants=tuple(_members(variants, "values")))
            for name, variants in _section(d, "enums").items()
        )
        functions = tuple(
            FunctionDefinition(
                name=name,
                params=tuple(_parse_params(_members(function_def, "params"))),
                return_type=function_def.get("return_type") if isinstance(function_def, Mapping) else None,
            )
            for name, function_def in _section(d, "functions").items()
        )
        return SchemaDefinition(classes=classes, enums=enums, functions=functions, source=source)


SchemaLoader = Callable[[str], SchemaDefinition]


def _section(d: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(d, Mapping):
        raise ValueError(f"Schema must be a JSON object, got {type(d).__name__}")
    section = d.get(key) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Schema section '{key}' must map names to definitions")
    return section


def _members(definition: Any, key: str) -> Any:
    # Allow both {"fields": [...]} and a bare list/mapping
    if isinstance(definition, Mapping) and key in definition:
        return definition[key]
    return definition


def _iter_named(entries: Any) -> Iterable[tuple[str, Any]]:
    if isinstance(entries, Mapping):
        for name, value in entries.items():
            if isinstance(value, Mapping) and "type" in value:
                yield name, value
            else:
                yield name, {"type": value}
    else:
        if entries is not None and not isinstance(entries, (list, tuple)):
            raise ValueError(f"Expected a list or mapping of named entries, got {entries!r}")
        for entry in entries or []:
            if not isinstance(entry, Mapping) or "name" not in entry:
                raise ValueError(f"Schema entry must be an object with a name: {entry!r}")
            yield entry["name"], entry


def _parse_fields(entries: Any) -> Iterable[FieldDefinition]:
    for name, entry in _iter_named(entries):
        yield FieldDefinition(
            name=name,
            type=_freeze(entry.get("type")),
            optional=bool(entry.get("optional", False)),
            description=entry.get("description"),
        )


def _parse_params(entries: Any) -> Iterable[ParamDefinition]:
    for name, entry in _iter_named(entries):
        yield ParamDefinition(name=name, type=_freeze(entry.get("type")), optional=bool(entry.get("optional", False)))


def _freeze(descriptor: Any) -> Any:
    """Turn JSON lists into tuples so definitions stay hashable and immutable."""
    if isinstance(descriptor, list):
        return tuple(_freeze(item) for item in descriptor)
    return descriptor


def load_schema(path: str | Path) -> SchemaDefinition:
    """Load a schema dump from a JSON file or a directory of JSON files.

    Directory contents are merged in sorted file order; a later file
    redefining a name replaces the earlier definition.

    Args:
        path: JSON file or directory containing ``*.json`` files

    Returns:
        The loaded schema, labelled with ``path`` as its source
    """
    path = Path(path)
    files = sorted(path.glob("*.json")) if path.is_dir() else [path]
    merged: dict[str, dict[str, Any]] = {"classes": {}, "enums": {}, "functions": {}}

    for schema_file in files:
        logger.debug("Loading schema file %s", schema_file)
        with open(schema_file, encoding="utf-8") as f:
            data = json.load(f)
        for section in merged:
            merged[section].update(_section(data, section))

    schema = SchemaDefinition.from_dict(merged, source=str(path))
    logger.debug(
        "Loaded %d classes, %d enums, %d functions from %s",
        len(schema.classes),
        len(schema.enums),
        len(schema.functions),
        path,
    )
    return schema
