"""
Tests for writing generated modules to disk and importing them back.
"""

from __future__ import annotations

import dataclasses
import importlib
import sys
from pathlib import Path
from unittest import mock

import pytest

from baml_to_code.generator import AtomicWriter, CodeWriteError, CodeWriter, TypeGenerator
from baml_to_code.schema import SchemaDefinition, load_schema

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture
def clean_modules():
    """Forget generated packages imported by a test."""
    before = set(sys.modules)
    yield
    for name in set(sys.modules) - before:
        if name.startswith("generated_"):
            del sys.modules[name]


class TestAtomicWriter:
    def test_write(self, tmp_path):
        target = tmp_path / "pkg" / "mod.py"
        AtomicWriter().write(target, "x = 1\n")
        assert target.read_text() == "x = 1\n"

    def test_invalid_python_leaves_nothing_behind(self, tmp_path):
        target = tmp_path / "mod.py"
        target.write_text("x = 1\n")
        with pytest.raises(CodeWriteError):
            AtomicWriter().write(target, "def broken(:\n")
        assert target.read_text() == "x = 1\n"
        assert list(tmp_path.iterdir()) == [target]

    def test_validation_can_be_skipped(self, tmp_path):
        target = tmp_path / "notes.py"
        AtomicWriter().write(target, "not python (", validate=False)
        assert target.read_text() == "not python ("

    def test_custom_validator(self, tmp_path):
        validator = mock.Mock()
        AtomicWriter(validate_python=validator).write(tmp_path / "a.py", "y = 2\n")
        validator.assert_called_once_with("y = 2\n")


class TestCodeWriter:
    """Writing a GenerationResult"""

    def test_module_to_path(self, tmp_path):
        path = CodeWriter.module_to_path("myapp.baml_client.types.task_list", tmp_path)
        assert path == tmp_path / "myapp" / "baml_client" / "types" / "task_list.py"

    def test_one_file_per_type(self, tmp_path):
        result = TypeGenerator().generate(load_schema(TEST_DATA / "tasks.json"), "myapp.baml_client")
        written = CodeWriter().write(result, tmp_path)
        types_dir = tmp_path / "myapp" / "baml_client" / "types"
        assert written == [
            types_dir / "task.py",
            types_dir / "person.py",
            types_dir / "priority.py",
            types_dir / "__init__.py",
        ]
        assert all(path.exists() for path in written)

    def test_without_package_init(self, tmp_path):
        result = TypeGenerator().generate(load_schema(TEST_DATA / "tasks.json"), "myapp.baml_client")
        written = CodeWriter().write(result, tmp_path, package_init=False)
        assert not (tmp_path / "myapp" / "baml_client" / "types" / "__init__.py").exists()
        assert len(written) == 3

    def test_rewrite_is_identical(self, tmp_path):
        result = TypeGenerator().generate(load_schema(TEST_DATA / "tasks.json"), "myapp.baml_client")
        written = CodeWriter().write(result, tmp_path)
        first = [path.read_text() for path in written]
        CodeWriter().write(TypeGenerator().generate(load_schema(TEST_DATA / "tasks.json"), "myapp.baml_client"), tmp_path)
        assert [path.read_text() for path in written] == first

    def test_invalid_module_writes_nothing(self, tmp_path):
        result = TypeGenerator().generate(load_schema(TEST_DATA / "tasks.json"), "myapp.baml_client")
        result.modules[-1] = dataclasses.replace(result.modules[-1], source_text="class Priority(:\n")
        with pytest.raises(CodeWriteError, match="priority.py"):
            CodeWriter().write(result, tmp_path)
        assert list(tmp_path.iterdir()) == []

    def test_keyword_class_name_writes_nothing(self, tmp_path):
        schema = SchemaDefinition.from_dict({"classes": {"Good": {"name": "string"}, "class": {"name": "string"}}})
        with pytest.raises(CodeWriteError):
            CodeWriter().write(TypeGenerator().generate(schema, "app"), tmp_path)
        assert list(tmp_path.iterdir()) == []


@pytest.mark.usefixtures("clean_modules")
class TestGeneratedPackageImports:
    """Generated modules import and behave as dataclasses and enums"""

    def _write(self, tmp_path, monkeypatch, client_module):
        result = TypeGenerator().generate(load_schema(TEST_DATA / "tasks.json"), client_module)
        CodeWriter().write(result, tmp_path)
        root = tmp_path / client_module.split(".")[0]
        (root / "__init__.py").write_text("")
        monkeypatch.syspath_prepend(str(tmp_path))
        importlib.invalidate_caches()

    def test_import_types_package(self, tmp_path, monkeypatch):
        self._write(tmp_path, monkeypatch, "generated_pkg_a")
        types = importlib.import_module("generated_pkg_a.types")
        task = types.Task(title="Write docs", priority=types.Priority.high_priority, tags=["docs"])
        assert task.due_date is None
        assert task.subtasks is None
        assert types.Priority("Medium") is types.Priority.medium
        assert types.__all__ == ["Task", "Person", "Priority"]

    def test_self_referencing_class(self, tmp_path, monkeypatch):
        self._write(tmp_path, monkeypatch, "generated_pkg_b")
        task_module = importlib.import_module("generated_pkg_b.types.task")
        child = task_module.Task(title="child", priority="Low", tags=[])
        parent = task_module.Task(title="parent", priority="High", tags=[], subtasks=[child])
        assert parent.subtasks[0] is child

    def test_fields_named_like_template_imports(self, tmp_path, monkeypatch):
        schema = SchemaDefinition.from_dict({"classes": {"Record": {"dataclasses": "string", "typing": "mystery", "name": "string"}}})
        result = TypeGenerator().generate(schema, "generated_pkg_c")
        CodeWriter().write(result, tmp_path)
        (tmp_path / "generated_pkg_c" / "__init__.py").write_text("")
        monkeypatch.syspath_prepend(str(tmp_path))
        importlib.invalidate_caches()

        record_module = importlib.import_module("generated_pkg_c.types.record")
        record = record_module.Record(dataclasses_="a", typing_=1, name="n")
        assert record.name == "n"
        fields = {f.name: f for f in dataclasses.fields(record)}
        assert fields["dataclasses_"].metadata["alias"] == "dataclasses"
        assert fields["typing_"].metadata["alias"] == "typing"
