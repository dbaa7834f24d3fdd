"""
Type generator.

Turns every class and enum of a schema into a GeneratedModule: maps field
types to the IR, canonicalizes names, renders the source and records
mapping degradations as warnings.
"""

from __future__ import annotations

import logging

from ..config import GeneratorConfig
from ..schema import ClassDefinition, EnumDefinition, SchemaDefinition
from ..utils import safe_identifier, to_snake_case
from .emitter import STRUCT_MODULE_NAMES, PythonEmitter
from .ir_nodes import FieldDef, FieldType, GeneratedModule, GenerationResult, ModuleKind, VariantDef
from .type_mapper import descriptor_description, find_reference_cycles, is_nullable, map_type, unknown_tags

logger = logging.getLogger(__name__)


class TypeGenerator:
    """Generates type modules for one schema."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()
        self.emitter = PythonEmitter()

    def types_module(self, client_module: str) -> str:
        """Dotted path of the package holding generated types for a client."""
        return f"{client_module}.{self.config.types_submodule}"

    def generate(self, schema: SchemaDefinition, client_module: str) -> GenerationResult:
        """
        Generate all type modules for a schema.

        Classes come first, then enums, each in schema declaration order.

        Args:
            schema: The loaded schema
            client_module: Dotted path of the client module owning the types

        Returns:
            GenerationResult with the modules and any warnings
        """
        types_module = self.types_module(client_module)
        provenance = self.config.source_label or schema.source
        result = GenerationResult(types_module=types_module)

        for cycle in find_reference_cycles(schema):
            warning = f"Classes reference each other cyclically: {' -> '.join(cycle)}"
            logger.warning(warning)
            result.warnings.append(warning)

        for class_def in schema.classes:
            result.modules.append(self.generate_struct(class_def, types_module, provenance, result.warnings))

        for enum_def in schema.enums:
            result.modules.append(self.generate_enum(enum_def, types_module, provenance, result.warnings))

        result.package_init = self.emitter.emit_package_init(
            [m.class_name for m in result.modules],
            client_module,
            provenance,
        )

        logger.info("Generated %d type modules in %s", len(result.modules), types_module)
        return result

    def generate_struct(
        self,
        class_def: ClassDefinition,
        types_module: str,
        provenance: str,
        warnings: list[str] | None = None,
    ) -> GeneratedModule:
        target_module = f"{types_module}.{to_snake_case(class_def.name)}"
        fields = []
        used_names: set[str] = set()

        for field_def in class_def.fields:
            field_type = map_type(field_def.type)
            if field_def.optional and not is_nullable(field_type):
                field_type = FieldType.optional(field_type)

            for tag in unknown_tags(field_type):
                warning = f"Field {class_def.name}.{field_def.name} has unsupported type {tag!r}, falling back to typing.Any"
                logger.warning(warning)
                if warnings is not None:
                    warnings.append(warning)

            name = _unique(safe_identifier(to_snake_case(field_def.name), reserved=STRUCT_MODULE_NAMES), used_names, class_def.name, warnings)
            fields.append(
                FieldDef(
                    name=name,
                    original_name=field_def.name,
                    type=field_type,
                    nullable=is_nullable(field_type),
                    description=field_def.description or descriptor_description(field_def.type),
                )
            )

        source_text = self.emitter.emit_struct(class_def.name, fields, target_module, provenance)
        return GeneratedModule(
            name=f"{target_module}.{class_def.name}",
            kind=ModuleKind.STRUCT,
            members=tuple(fields),
            provenance=provenance,
            source_text=source_text,
        )

    def generate_enum(
        self,
        enum_def: EnumDefinition,
        types_module: str,
        provenance: str,
        warnings: list[str] | None = None,
    ) -> GeneratedModule:
        target_module = f"{types_module}.{to_snake_case(enum_def.name)}"
        used_names: set[str] = set()
        variants = tuple(
            VariantDef(
                name=_unique(safe_identifier(to_snake_case(variant), prefix="value_"), used_names, enum_def.name, warnings),
                original_name=variant,
            )
            for variant in enum_def.variants
        )

        source_text = self.emitter.emit_enum(enum_def.name, variants, target_module, provenance)
        return GeneratedModule(
            name=f"{target_module}.{enum_def.name}",
            kind=ModuleKind.ENUM,
            members=variants,
            provenance=provenance,
            source_text=source_text,
        )


def _unique(name: str, used: set[str], owner: str, warnings: list[str] | None) -> str:
    """Suffix a canonical name that collides with an earlier one in the same type."""
    candidate = name
    counter = 2
    while candidate in used:
        candidate = f"{name}_{counter}"
        counter += 1
    if candidate != name:
        warning = f"{owner}: canonical name {name!r} is already used, renamed to {candidate!r}"
        logger.warning(warning)
        if warnings is not None:
            warnings.append(warning)
    used.add(candidate)
    return candidate
