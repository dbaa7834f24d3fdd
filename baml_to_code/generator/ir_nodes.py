"""
IR (Intermediate Representation) node definitions.

FieldType is the closed set of types a schema field, parameter or return
value can have once mapped. Class and enum references are kept by name and
only resolved to a generated module path when rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TypeKind(Enum):
    """Kind of type in the IR."""

    PRIMITIVE = "primitive"  # str, int, float, bool, Any
    OPTIONAL = "optional"  # T | None
    LIST = "list"  # list[T]
    CLASS_REF = "class"  # A generated struct, by name
    ENUM_REF = "enum"  # A generated enum, by name
    UNKNOWN = "unknown"  # Anything the mapper does not understand


class PrimitiveKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FieldType:
    """A mapped type.

    ``name`` holds the primitive kind, the referenced class/enum name or the
    original tag of an unknown descriptor. ``inner`` is set for OPTIONAL and
    LIST only.
    """

    kind: TypeKind
    name: str = ""
    inner: FieldType | None = None

    @classmethod
    def primitive(cls, kind: PrimitiveKind) -> FieldType:
        return cls(TypeKind.PRIMITIVE, name=kind.value)

    @classmethod
    def optional(cls, inner: FieldType) -> FieldType:
        return cls(TypeKind.OPTIONAL, inner=inner)

    @classmethod
    def list_of(cls, inner: FieldType) -> FieldType:
        return cls(TypeKind.LIST, inner=inner)

    @classmethod
    def class_ref(cls, name: str) -> FieldType:
        return cls(TypeKind.CLASS_REF, name=name)

    @classmethod
    def enum_ref(cls, name: str) -> FieldType:
        return cls(TypeKind.ENUM_REF, name=name)

    @classmethod
    def unknown(cls, tag: str) -> FieldType:
        return cls(TypeKind.UNKNOWN, name=tag)

    @property
    def is_reference(self) -> bool:
        return self.kind in (TypeKind.CLASS_REF, TypeKind.ENUM_REF)


class ModuleKind(Enum):
    STRUCT = "struct"
    ENUM = "enum"


@dataclass(frozen=True)
class FieldDef:
    """A struct field ready for emission."""

    name: str  # Canonical (snake_case) field name
    original_name: str  # Name as declared in the schema
    type: FieldType
    nullable: bool = False
    description: str | None = None


@dataclass(frozen=True)
class VariantDef:
    """An enum variant ready for emission."""

    name: str  # Canonical (snake_case) variant name
    original_name: str


@dataclass(frozen=True)
class GeneratedModule:
    """One generated type declaration, written as a single file."""

    name: str  # Fully-qualified class path, e.g. "myapp.client.types.task.Task"
    kind: ModuleKind
    members: tuple[FieldDef, ...] | tuple[VariantDef, ...]
    provenance: str
    source_text: str

    @property
    def module_path(self) -> str:
        """Dotted path of the Python module holding the declaration."""
        return self.name.rsplit(".", 1)[0]

    @property
    def class_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


@dataclass
class GenerationResult:
    """Output of one type generation run."""

    types_module: str = ""
    modules: list[GeneratedModule] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    package_init: str = ""
