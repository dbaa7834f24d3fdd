"""
Client resolution and client module synthesis.
"""

from __future__ import annotations

from .registry import BackendClient, ClientModule, ClientModuleRegistry
from .resolver import resolve_client, validate_client_selection, validate_identifier

__all__ = [
    "BackendClient",
    "ClientModule",
    "ClientModuleRegistry",
    "resolve_client",
    "validate_client_selection",
    "validate_identifier",
]
