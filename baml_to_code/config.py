"""
Configuration for type generation and client resolution.

Configuration is read once, at the start of a build, and passed
explicitly to every component that needs it.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError, IdentifierError

# Client identifiers: lowercase start, then lowercase letters, digits and underscores
IDENTIFIER_PATTERN = re.compile(r"[a-z][a-z0-9_]*")


def is_valid_identifier(identifier: Any) -> bool:
    return isinstance(identifier, str) and IDENTIFIER_PATTERN.fullmatch(identifier) is not None


@dataclass
class GeneratorConfig:
    """Configuration options for type generation."""

    # Name of the subpackage holding generated types, under the client module
    types_submodule: str = "types"

    # Provenance label written into generated files (empty = schema source)
    source_label: str = ""

    # Whether to validate generated Python before writing
    validate_before_write: bool = True

    # Whether to write the types package __init__.py
    write_package_init: bool = True

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "types_submodule": self.types_submodule,
            "source_label": self.source_label,
            "validate_before_write": self.validate_before_write,
            "write_package_init": self.write_package_init,
        }


@dataclass(frozen=True)
class ClientSpec:
    """Static configuration of one backend client."""

    module: str
    path: str


@dataclass(frozen=True)
class ClientConfig:
    """Mapping of client identifiers to their configuration.

    Identifiers are validated on construction, so an invalid key is
    reported before any client module is synthesized.
    """

    clients: Mapping[str, ClientSpec] = field(default_factory=dict)

    def __post_init__(self):
        for identifier in self.clients:
            if not is_valid_identifier(identifier):
                raise IdentifierError(identifier)

    def get(self, identifier: str) -> ClientSpec | None:
        return self.clients.get(identifier)

    @property
    def identifiers(self) -> list[str]:
        return list(self.clients)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> ClientConfig:
        """Create a client config from ``{"clients": {id: {"module": ..., "path": ...}}}``.

        The top-level ``clients`` key may be omitted.
        """
        entries = d.get("clients", d)
        clients = {}
        for identifier, entry in entries.items():
            if not isinstance(entry, Mapping) or "module" not in entry:
                raise ConfigError(f"Client {identifier!r} must be configured as {{\"module\": ..., \"path\": ...}}, got: {entry!r}")
            clients[identifier] = ClientSpec(module=entry["module"], path=entry.get("path", ""))
        return ClientConfig(clients=clients)

    def to_dict(self) -> dict:
        return {"clients": {k: {"module": v.module, "path": v.path} for k, v in self.clients.items()}}


@dataclass(frozen=True)
class ResourceDefinition:
    """A resource importing BAML functions as actions.

    Exactly one of ``client`` (a configured client identifier) and
    ``client_module`` (an explicitly provided module) must be set.
    """

    name: str
    client: str | None = None
    client_module: str | None = None
    import_functions: tuple[str, ...] = ()
    telemetry: bool = False

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> ResourceDefinition:
        return ResourceDefinition(
            name=d.get("name", "resource"),
            client=d.get("client"),
            client_module=d.get("client_module"),
            import_functions=tuple(d.get("import_functions", ())),
            telemetry=bool(d.get("telemetry", False)),
        )


def load_json(path: str | Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)
