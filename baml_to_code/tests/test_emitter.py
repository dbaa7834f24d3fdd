"""
Tests for the Python code emitter.

Generated source is checked textually and by executing it.
"""

from __future__ import annotations

import ast
import dataclasses
import enum
import sys
from types import ModuleType

import pytest

from baml_to_code.generator.emitter import PythonEmitter, emit_enum, emit_struct, py_string
from baml_to_code.generator.ir_nodes import FieldDef, FieldType, PrimitiveKind, VariantDef
from baml_to_code.generator.type_mapper import is_nullable, map_type

TARGET = "myapp.baml_client.types.person"


def _field(name, descriptor, original_name=None, description=None):
    field_type = map_type(descriptor)
    return FieldDef(
        name=name,
        original_name=original_name or name,
        type=field_type,
        nullable=is_nullable(field_type),
        description=description,
    )


def _exec(source: str, name: str = "generated_types") -> dict:
    # dataclasses resolves the defining module through sys.modules
    module = ModuleType(name)
    sys.modules[name] = module
    try:
        exec(compile(source, "<generated>", "exec"), module.__dict__)
    finally:
        del sys.modules[name]
    return module.__dict__


class TestEmitStruct:
    """Struct emission"""

    def test_fields_in_declaration_order(self):
        source = emit_struct("Person", [_field("age", "int"), _field("name", "string")], TARGET)
        assert source.index("    age: int") < source.index("    name: str")

    def test_field_lines(self):
        source = emit_struct(
            "Person",
            [
                _field("name", "string", description="Full name"),
                _field("nickname", ("optional", "string")),
            ],
            TARGET,
        )
        assert 'name: str = dataclasses.field(metadata={"nullable": False, "description": "Full name"})' in source
        assert 'nickname: str | None = dataclasses.field(default=None, metadata={"nullable": True})' in source

    def test_description_omitted_when_absent(self):
        source = emit_struct("Person", [_field("name", "string")], TARGET)
        assert '"description"' not in source

    def test_alias_when_name_differs(self):
        source = emit_struct("Person", [_field("first_name", "string", original_name="firstName")], TARGET)
        assert '"alias": "firstName"' in source

    def test_provenance(self):
        assert "Source: unknown" in emit_struct("Person", [], TARGET)
        assert "Source: baml_src/people.baml" in emit_struct("Person", [], TARGET, provenance="baml_src/people.baml")

    def test_do_not_edit_warning(self):
        source = emit_struct("Person", [], TARGET)
        assert "Generated from BAML class: Person" in source
        assert "Do not edit directly" in source

    def test_references_are_imported(self):
        source = emit_struct(
            "TaskList",
            [
                _field("tasks", ("list", ("class", "Task"))),
                _field("owner", ("optional", ("class", "Person"))),
                _field("backup", ("class", "Task")),
            ],
            "myapp.baml_client.types.task_list",
        )
        assert "import myapp.baml_client.types.person\nimport myapp.baml_client.types.task\n" in source
        assert "tasks: list[myapp.baml_client.types.task.Task]" in source
        assert source.count("import myapp.baml_client.types.task\n") == 1

    def test_typing_imported_for_any(self):
        assert "import typing" in emit_struct("Blob", [_field("data", ("map", "string", "int"))], TARGET)
        assert "import typing" not in emit_struct("Blob", [_field("data", "string")], TARGET)

    def test_valid_python(self):
        source = emit_struct(
            "Person",
            [_field("name", "string"), _field("age", ("optional", "int")), _field("owner", ("class", "Other"))],
            TARGET,
        )
        ast.parse(source)

    def test_generated_dataclass(self):
        source = emit_struct(
            "Person",
            [
                _field("name", "string", description="Full name"),
                _field("age", ("optional", "int")),
                _field("tags", ("list", "string")),
            ],
            TARGET,
        )
        person_cls = _exec(source)["Person"]
        person = person_cls(name="Ada", tags=["x"])
        assert person.age is None
        assert [f.name for f in dataclasses.fields(person_cls)] == ["name", "age", "tags"]
        name_field = dataclasses.fields(person_cls)[0]
        assert name_field.metadata["description"] == "Full name"
        assert name_field.metadata["nullable"] is False

    def test_idempotent(self):
        fields = [_field("name", "string"), _field("owner", ("class", "Other"))]
        assert emit_struct("Person", fields, TARGET) == emit_struct("Person", fields, TARGET)

    def test_provenance_escaped(self):
        source = emit_struct("Person", [], TARGET, provenance='C:\\baml\\"""weird"""')
        ast.parse(source)


class TestEmitEnum:
    """Enum emission"""

    VARIANTS = [
        VariantDef("low", "Low"),
        VariantDef("medium", "Medium"),
        VariantDef("high_priority", "HighPriority"),
    ]

    def test_members(self):
        source = emit_enum("Priority", self.VARIANTS, "myapp.baml_client.types.priority")
        assert 'low = "Low"' in source
        assert 'medium = "Medium"' in source
        assert 'high_priority = "HighPriority"' in source
        assert "class Priority(str, enum.Enum):" in source

    def test_docstring_lists_values(self):
        source = emit_enum("Priority", self.VARIANTS, "myapp.baml_client.types.priority")
        assert "high_priority — HighPriority" in source
        assert "Source: unknown" in source

    def test_generated_enum(self):
        source = emit_enum("Priority", self.VARIANTS, "myapp.baml_client.types.priority")
        priority = _exec(source)["Priority"]
        assert issubclass(priority, enum.Enum)
        assert priority("HighPriority") is priority.high_priority
        assert [m.name for m in priority] == ["low", "medium", "high_priority"]

    def test_empty_enum(self):
        ast.parse(emit_enum("Empty", [], "myapp.baml_client.types.empty"))


class TestPackageInit:
    def test_reexports(self):
        source = PythonEmitter().emit_package_init(["TaskList", "Priority"], "myapp.baml_client")
        assert "from .task_list import TaskList" in source
        assert "from .priority import Priority" in source
        assert '"TaskList",' in source
        ast.parse(source)

    def test_empty(self):
        ast.parse(PythonEmitter().emit_package_init([], "myapp.baml_client"))


@pytest.mark.parametrize("value,expected", [("Low", '"Low"'), ('say "hi"', '"say \\"hi\\""'), ("é", '"é"')])
def test_py_string(value, expected):
    assert py_string(value) == expected


def test_field_type_for_primitive_unknown():
    field = FieldDef("raw", "raw", FieldType.primitive(PrimitiveKind.UNKNOWN))
    assert "raw: typing.Any" in emit_struct("Raw", [field], TARGET)
