"""BAML to Code Generator

Generates Python dataclasses and enums from BAML schema definitions and
synthesizes sync and streaming actions from BAML functions, with
config-driven client modules and an ordered build pipeline.
"""

__version__ = "0.1.0"

from .actions import ActionRegistry, ActionSpec, synthesize_actions
from .clients import ClientModule, ClientModuleRegistry
from .config import ClientConfig, GeneratorConfig, ResourceDefinition
from .errors import GenerationError
from .generator import CodeWriter, TypeGenerator, emit_enum, emit_struct, map_type
from .pipeline import Pipeline, build_actions, default_pipeline
from .schema import SchemaDefinition, load_schema
from .stream import StreamHandle

__all__ = [
    "TypeGenerator",
    "CodeWriter",
    "emit_struct",
    "emit_enum",
    "map_type",
    "SchemaDefinition",
    "load_schema",
    "ClientConfig",
    "GeneratorConfig",
    "ResourceDefinition",
    "ClientModule",
    "ClientModuleRegistry",
    "Pipeline",
    "default_pipeline",
    "build_actions",
    "ActionSpec",
    "ActionRegistry",
    "synthesize_actions",
    "StreamHandle",
    "GenerationError",
]
