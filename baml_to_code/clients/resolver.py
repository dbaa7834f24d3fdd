"""
Client configuration resolver.

Validates how a resource selects its client and resolves configured
client identifiers to module identifiers.
"""

from __future__ import annotations

from ..config import ClientConfig, ResourceDefinition, is_valid_identifier
from ..errors import ConfigError, IdentifierError, ModuleSynthesisError

_ALTERNATIVES = """Choose one approach:

Config-driven (recommended):
  client: support

Explicit client module:
  client_module: myapp.baml_client"""


def validate_identifier(identifier: str) -> str:
    """Return ``identifier`` if it follows the naming rule, else raise IdentifierError."""
    if not is_valid_identifier(identifier):
        raise IdentifierError(identifier)
    return identifier


def validate_client_selection(resource: ResourceDefinition) -> None:
    """
    Check that a resource declares exactly one of ``client`` and ``client_module``.

    Raises:
        ConfigError: If both or neither are declared
        IdentifierError: If ``client`` is not a valid identifier
    """
    if resource.client and resource.client_module:
        raise ConfigError(f"Resource {resource.name!r} cannot specify both client and client_module.\n\n{_ALTERNATIVES}")
    if not resource.client and not resource.client_module:
        raise ConfigError(f"Resource {resource.name!r} must specify either client or client_module.\n\n{_ALTERNATIVES}")
    if resource.client:
        validate_identifier(resource.client)


def resolve_client(identifier: str, client_config: ClientConfig) -> str:
    """
    Resolve a client identifier to its configured module identifier.

    Args:
        identifier: Client identifier, e.g. ``"support"``
        client_config: Static client configuration

    Returns:
        The module identifier, e.g. ``"myapp.baml_clients.support"``

    Raises:
        IdentifierError: If the identifier is malformed
        ModuleSynthesisError: If the identifier is not configured
    """
    validate_identifier(identifier)
    spec = client_config.get(identifier)
    if spec is None:
        raise ModuleSynthesisError(client_not_configured_message(identifier, client_config))
    return spec.module


def client_not_configured_message(identifier: str, client_config: ClientConfig) -> str:
    if client_config.identifiers:
        available = f"Available: {', '.join(client_config.identifiers)}."
    else:
        available = "No clients configured."
    return (
        f"BAML client {identifier!r} not found in client configuration (missing key clients.{identifier}). {available} "
        f'Add: {{"clients": {{"{identifier}": {{"module": "myapp.baml_client", "path": "baml_src"}}}}}}'
    )
