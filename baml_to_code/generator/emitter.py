"""
Python code emitter.

Renders struct and enum declarations from IR-mapped members using the
Jinja2 templates in ``templates/python``. Output depends only on the
inputs: members keep their declaration order and imports are sorted, so
generating twice from the same schema gives byte-identical files.
"""

from __future__ import annotations

import functools
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import jinja2

from ..schema import UNKNOWN_SOURCE
from ..utils import to_snake_case
from .ir_nodes import FieldDef, VariantDef
from .type_mapper import ANY_TYPE, referenced_names, reference_path, target_expression

# Modules the struct template imports by name; a field must not shadow them
STRUCT_MODULE_NAMES = frozenset({"dataclasses", "typing"})


def py_string(value: str) -> str:
    """Render a string as a Python literal (double-quoted)."""
    return json.dumps(value, ensure_ascii=False)


def _doc_text(text: str) -> str:
    """Escape text for embedding in a generated docstring."""
    return text.replace("\\", "\\\\").replace('"""', r'\"\"\"')


def _py_value(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return repr(value)
    return py_string(str(value))


class PythonEmitter:
    """Renders generated type modules as Python source."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"

    def __init__(self):
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["snake_case"] = to_snake_case
        self.jinja_env.filters["py_string"] = py_string

        self.struct_template = self.jinja_env.get_template(f"struct.{self.FILE_EXTENSION}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{self.FILE_EXTENSION}.jinja2")
        self.package_init_template = self.jinja_env.get_template(f"package_init.{self.FILE_EXTENSION}.jinja2")

    def emit_struct(
        self,
        name: str,
        fields: Sequence[FieldDef],
        target_module: str,
        provenance: str | None = None,
    ) -> str:
        """
        Render a struct declaration.

        Args:
            name: Schema class name, used as the Python class name
            fields: Fields in schema declaration order
            target_module: Dotted path of the module being generated. Its
                parent package is the namespace for class/enum references.
            provenance: Label of the originating schema source

        Returns:
            Python source text
        """
        namespace = _namespace_of(target_module)
        imports: set[str] = set()
        needs_typing = False
        field_contexts = []

        for field_def in fields:
            type_str = target_expression(field_def.type, namespace)
            needs_typing = needs_typing or ANY_TYPE in type_str
            if namespace:
                for ref in referenced_names(field_def.type):
                    imports.add(reference_path(ref, namespace).rsplit(".", 1)[0])

            field_contexts.append(
                {
                    "name": field_def.name,
                    "type": type_str,
                    "args": self._field_args(field_def),
                }
            )

        return self.struct_template.render(
            schema_name=name,
            class_name=name,
            provenance=_doc_text(provenance or UNKNOWN_SOURCE),
            fields=field_contexts,
            imports=sorted(imports),
            needs_typing=needs_typing,
        )

    def emit_enum(
        self,
        name: str,
        variants: Sequence[VariantDef],
        target_module: str,
        provenance: str | None = None,
    ) -> str:
        """
        Render an enum declaration.

        Each member's value is the original schema variant name, and the
        module docstring lists ``canonical — Original`` for every variant.

        Args:
            name: Schema enum name
            variants: Variants in schema declaration order
            target_module: Dotted path of the module being generated
            provenance: Label of the originating schema source

        Returns:
            Python source text
        """
        return self.enum_template.render(
            schema_name=name,
            class_name=name,
            provenance=_doc_text(provenance or UNKNOWN_SOURCE),
            variants=list(variants),
        )

    def emit_package_init(self, class_names: Sequence[str], client_module: str, provenance: str | None = None) -> str:
        """Render the ``__init__.py`` re-exporting every generated class."""
        return self.package_init_template.render(
            class_names=list(class_names),
            client_module=client_module,
            provenance=_doc_text(provenance or UNKNOWN_SOURCE),
        )

    def _field_args(self, field_def: FieldDef) -> str:
        metadata: dict[str, Any] = {"nullable": field_def.nullable}
        if field_def.description:
            metadata["description"] = field_def.description
        if field_def.original_name != field_def.name:
            metadata["alias"] = field_def.original_name

        rendered_metadata = ", ".join(f"{py_string(k)}: {_py_value(v)}" for k, v in metadata.items())
        args = f"metadata={{{rendered_metadata}}}"
        if field_def.nullable:
            args = f"default=None, {args}"
        return args


def _namespace_of(target_module: str) -> str | None:
    if "." not in target_module:
        return None
    return target_module.rsplit(".", 1)[0]


@functools.cache
def _emitter() -> PythonEmitter:
    return PythonEmitter()


def emit_struct(name: str, fields: Sequence[FieldDef], target_module: str, provenance: str | None = None) -> str:
    return _emitter().emit_struct(name, fields, target_module, provenance)


def emit_enum(name: str, variants: Sequence[VariantDef], target_module: str, provenance: str | None = None) -> str:
    return _emitter().emit_enum(name, variants, target_module, provenance)
