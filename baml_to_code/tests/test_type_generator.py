"""
Tests for whole-schema type generation.
"""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

from baml_to_code.config import GeneratorConfig
from baml_to_code.generator import ModuleKind, TypeGenerator
from baml_to_code.schema import ClassDefinition, EnumDefinition, FieldDefinition, SchemaDefinition, load_schema

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture
def schema():
    return load_schema(TEST_DATA / "tasks.json")


class TestTypeGenerator:
    """Generating every class and enum of a schema"""

    def test_classes_then_enums(self, schema):
        result = TypeGenerator().generate(schema, "myapp.baml_client")
        assert [m.name for m in result.modules] == [
            "myapp.baml_client.types.task.Task",
            "myapp.baml_client.types.person.Person",
            "myapp.baml_client.types.priority.Priority",
        ]
        assert [m.kind for m in result.modules] == [ModuleKind.STRUCT, ModuleKind.STRUCT, ModuleKind.ENUM]
        assert result.types_module == "myapp.baml_client.types"

    def test_all_modules_parse(self, schema):
        result = TypeGenerator().generate(schema, "myapp.baml_client")
        for module in result.modules:
            ast.parse(module.source_text)
        ast.parse(result.package_init)

    def test_field_canonicalization(self, schema):
        task = TypeGenerator().generate(schema, "myapp.baml_client").modules[0]
        names = [f.name for f in task.members]
        assert names == ["title", "priority", "due_date", "tags", "subtasks"]
        due_date = task.members[2]
        assert due_date.original_name == "dueDate"
        assert due_date.nullable
        assert '"alias": "dueDate"' in task.source_text

    def test_description_from_descriptor_metadata(self, schema):
        task = TypeGenerator().generate(schema, "myapp.baml_client").modules[0]
        assert task.members[0].description == "Short task title"
        assert '"description": "Short task title"' in task.source_text

    def test_self_reference_reported(self, schema):
        result = TypeGenerator().generate(schema, "myapp.baml_client")
        assert "Classes reference each other cyclically: Task -> Task" in result.warnings
        assert "subtasks: list[myapp.baml_client.types.task.Task] | None" in result.modules[0].source_text

    def test_enum_variants(self, schema):
        priority = TypeGenerator().generate(schema, "myapp.baml_client").modules[2]
        assert [(v.name, v.original_name) for v in priority.members] == [
            ("low", "Low"),
            ("medium", "Medium"),
            ("high_priority", "HighPriority"),
        ]

    def test_provenance_defaults_to_schema_source(self, schema):
        result = TypeGenerator().generate(schema, "myapp.baml_client")
        assert f"Source: {schema.source}" in result.modules[0].source_text

    def test_source_label_overrides_provenance(self, schema):
        config = GeneratorConfig(source_label="baml_src/tasks.baml")
        result = TypeGenerator(config).generate(schema, "myapp.baml_client")
        assert all(m.provenance == "baml_src/tasks.baml" for m in result.modules)

    def test_custom_types_submodule(self, schema):
        result = TypeGenerator(GeneratorConfig(types_submodule="models")).generate(schema, "myapp.baml_client")
        assert result.modules[0].module_path == "myapp.baml_client.models.task"

    def test_unknown_field_type_warns(self, caplog):
        schema = SchemaDefinition(classes=(ClassDefinition("Blob", (FieldDefinition("data", ("map", "string", "int")),)),))
        result = TypeGenerator().generate(schema, "app")
        assert result.warnings == ["Field Blob.data has unsupported type 'map', falling back to typing.Any"]
        assert "Blob.data" in caplog.text
        assert "data: typing.Any" in result.modules[0].source_text

    def test_colliding_names_suffixed(self):
        schema = SchemaDefinition(
            classes=(
                ClassDefinition(
                    "User",
                    (FieldDefinition("userName", "string"), FieldDefinition("user_name", "string")),
                ),
            )
        )
        result = TypeGenerator().generate(schema, "app")
        assert [f.name for f in result.modules[0].members] == ["user_name", "user_name_2"]
        assert len(result.warnings) == 1

    def test_keyword_field_and_digit_variant(self):
        schema = SchemaDefinition(
            classes=(ClassDefinition("Import", (FieldDefinition("from", "string"),)),),
            enums=(EnumDefinition("Level", ("1", "Two")),),
        )
        result = TypeGenerator().generate(schema, "app")
        assert result.modules[0].members[0].name == "from_"
        assert [v.name for v in result.modules[1].members] == ["value_1", "two"]

    def test_fields_do_not_shadow_template_imports(self):
        schema = SchemaDefinition(classes=(ClassDefinition("Record", (FieldDefinition("dataclasses", "string"), FieldDefinition("name", "string"))),))
        result = TypeGenerator().generate(schema, "app")
        assert [f.name for f in result.modules[0].members] == ["dataclasses_", "name"]
        assert result.modules[0].members[0].original_name == "dataclasses"

    def test_idempotent(self, schema):
        first = TypeGenerator().generate(schema, "myapp.baml_client")
        second = TypeGenerator().generate(schema, "myapp.baml_client")
        assert [m.source_text for m in first.modules] == [m.source_text for m in second.modules]
        assert first.package_init == second.package_init

    def test_empty_schema(self):
        result = TypeGenerator().generate(SchemaDefinition(), "app")
        assert result.modules == []
        ast.parse(result.package_init)
