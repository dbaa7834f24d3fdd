"""
Generator - BAML schema to Python type modules.

1. Mapper: raw type descriptors to the FieldType IR
2. Type generator: schema classes/enums to GeneratedModule units
3. Emitter: IR-mapped members to Python source (Jinja2 templates)
4. Code writer: atomic, validated file output
"""

from __future__ import annotations

from .code_writer import AtomicWriter, CodeWriteError, CodeWriter
from .emitter import PythonEmitter, emit_enum, emit_struct
from .ir_nodes import (
    FieldDef,
    FieldType,
    GeneratedModule,
    GenerationResult,
    ModuleKind,
    PrimitiveKind,
    TypeKind,
    VariantDef,
)
from .type_generator import TypeGenerator
from .type_mapper import describe, find_reference_cycles, map_type, target_expression

__all__ = [
    "AtomicWriter",
    "CodeWriteError",
    "CodeWriter",
    "FieldDef",
    "FieldType",
    "GeneratedModule",
    "GenerationResult",
    "ModuleKind",
    "PrimitiveKind",
    "PythonEmitter",
    "TypeGenerator",
    "TypeKind",
    "VariantDef",
    "describe",
    "emit_enum",
    "emit_struct",
    "find_reference_cycles",
    "map_type",
    "target_expression",
]
