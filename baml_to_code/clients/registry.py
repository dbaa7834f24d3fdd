"""
Client module registry.

Client modules are created once per build and looked up by reference
afterwards. A client module binds a BAML source path to a backend client
capability; the backend itself (model calls, networking, retries) is
opaque to this package.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from ..config import ClientConfig
from ..errors import BackendNotConfiguredError, ModuleSynthesisError
from .resolver import resolve_client

logger = logging.getLogger(__name__)


class BackendClient(Protocol):
    """What a client module needs from the model backend."""

    def call(self, function: str, arguments: dict[str, Any]) -> Any: ...

    def stream(self, function: str, arguments: dict[str, Any]) -> Iterable[Any]: ...


BackendFactory = Callable[[str], BackendClient]


@dataclass(frozen=True)
class ClientModule:
    """A thin wrapper binding a BAML source path to a backend client."""

    name: str
    source_path: str
    backend: BackendClient | None = None
    identifier: str | None = None

    def call(self, function: str, arguments: dict[str, Any]) -> Any:
        return self._require_backend(function).call(function, arguments)

    def stream(self, function: str, arguments: dict[str, Any]) -> Iterable[Any]:
        return self._require_backend(function).stream(function, arguments)

    def _require_backend(self, function: str) -> BackendClient:
        if self.backend is None:
            raise BackendNotConfiguredError(f"Client module {self.name} has no backend configured, cannot call {function}")
        return self.backend


class ClientModuleRegistry:
    """Creates and holds the client modules of one build.

    ``synthesize`` is idempotent per identifier: the first call creates the
    module, later calls return the same object.

    Args:
        backend_factory: Builds the backend for a source path. Without one,
            client modules are created unbound and raise when called.
    """

    def __init__(self, backend_factory: BackendFactory | None = None):
        self._backend_factory = backend_factory
        self._by_identifier: dict[str, ClientModule] = {}
        self._by_name: dict[str, ClientModule] = {}
        self._lock = threading.Lock()

    def synthesize(self, identifier: str, client_config: ClientConfig) -> ClientModule:
        """
        Create the client module for a configured identifier, once.

        Args:
            identifier: Client identifier
            client_config: Static client configuration

        Returns:
            The client module, shared by every later request for ``identifier``

        Raises:
            IdentifierError: If the identifier is malformed
            ModuleSynthesisError: If the identifier is not configured, or has
                no source path and no module was registered for it
        """
        module_name = resolve_client(identifier, client_config)
        spec = client_config.get(identifier)

        with self._lock:
            existing = self._by_identifier.get(identifier) or self._by_name.get(module_name)
            if existing is not None:
                if spec.path and existing.source_path != spec.path:
                    logger.warning(
                        "Client module %s already exists with source %r, ignoring configured source %r",
                        module_name,
                        existing.source_path,
                        spec.path,
                    )
                self._by_identifier[identifier] = existing
                return existing

            if not spec.path:
                raise ModuleSynthesisError(
                    f"BAML client {identifier!r} is configured to use {module_name} but no path was provided. "
                    f"Provide a path or register {module_name} explicitly."
                )

            module = ClientModule(
                name=module_name,
                source_path=spec.path,
                backend=self._backend_factory(spec.path) if self._backend_factory else None,
                identifier=identifier,
            )
            self._by_identifier[identifier] = module
            self._by_name[module_name] = module

        logger.info("Synthesized client module %s for %r (source: %s)", module_name, identifier, spec.path)
        return module

    def register(self, module: ClientModule) -> ClientModule:
        """Register an explicitly provided client module under its name."""
        with self._lock:
            self._by_name[module.name] = module
        return module

    def get(self, module_name: str) -> ClientModule:
        module = self._by_name.get(module_name)
        if module is None:
            raise ModuleSynthesisError(
                f"Client module {module_name} is not registered. Register it explicitly or configure a client identifier for it."
            )
        return module

    def __contains__(self, module_name: object) -> bool:
        return module_name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)
