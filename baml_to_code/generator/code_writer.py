"""
Writing generated type modules to disk.

Writes are atomic so that an interrupted generation never leaves a
half-written module behind.
"""

from __future__ import annotations

import ast
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import GenerationError
from .ir_nodes import GenerationResult

logger = logging.getLogger(__name__)


class CodeWriteError(GenerationError):
    """Generated code failed validation or could not be written."""


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate_python: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_python: Optional validation function for Python code
        """
        self._validate_python = validate_python or self._default_validate_python

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            CodeWriteError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self.validate(content)

            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def validate(self, content: str) -> None:
        """Validate content without writing it.

        Raises:
            CodeWriteError: If validation fails
        """
        self._validate_python(content)

    def _default_validate_python(self, content: str) -> None:
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise CodeWriteError(f"Generated Python code is not valid: {e}") from e


class CodeWriter:
    """Writes a GenerationResult as one file per generated module."""

    def __init__(self, validate: bool = True, writer: AtomicWriter | None = None):
        self.validate = validate
        self.writer = writer or AtomicWriter()

    @staticmethod
    def module_to_path(module_name: str, base_path: str | Path) -> Path:
        """
        Convert a dotted module path to a file path.

        Example: ``myapp.baml_client.types.task`` -> ``<base>/myapp/baml_client/types/task.py``
        """
        parts = module_name.split(".")
        return Path(base_path).joinpath(*parts[:-1], f"{parts[-1]}.py")

    def write(self, result: GenerationResult, base_path: str | Path, package_init: bool = True) -> list[Path]:
        """
        Write every module of a generation result.

        Every file is validated before the first one is written, so an
        invalid module leaves the output tree untouched.

        Args:
            result: Output of TypeGenerator.generate
            base_path: Root directory for the generated package tree
            package_init: Whether to also write the types package ``__init__.py``

        Returns:
            Paths of the written files, in generation order

        Raises:
            CodeWriteError: If any generated module is not valid Python
        """
        files = [(self.module_to_path(module.module_path, base_path), module.source_text) for module in result.modules]
        if package_init and result.package_init:
            files.append((self.module_to_path(f"{result.types_module}.__init__", base_path), result.package_init))

        if self.validate:
            for path, content in files:
                try:
                    self.writer.validate(content)
                except CodeWriteError as e:
                    raise CodeWriteError(f"{path}: {e}") from e

        written = []
        for path, content in files:
            self.writer.write(path, content, validate=False)
            logger.info("Wrote %s", path)
            written.append(path)
        return written
