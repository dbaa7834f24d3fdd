"""
Call telemetry events.

Actions built with telemetry enabled emit one event before each backend
call and one after it:

- ``CALL_START`` with ``system_time`` and ``monotonic_time``
- ``CALL_STOP`` with ``duration`` and ``monotonic_time`` when the call returns
- ``CALL_EXCEPTION`` with the same measurements when the call raises

Metadata names the client module and function. Arguments and results are
never included; the exception event adds the raised ``error``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

Event = tuple[str, ...]
EventHandler = Callable[[Event, Mapping[str, Any], Mapping[str, Any]], None]

CALL_START: Event = ("baml_to_code", "call", "start")
CALL_STOP: Event = ("baml_to_code", "call", "stop")
CALL_EXCEPTION: Event = ("baml_to_code", "call", "exception")

_handlers: dict[str, tuple[frozenset[Event], EventHandler]] = {}
_lock = threading.Lock()


def attach(handler_id: str, events: Iterable[Event], handler: EventHandler) -> None:
    """
    Register a handler for one or more events.

    Raises:
        ValueError: If a handler is already attached under ``handler_id``
    """
    with _lock:
        if handler_id in _handlers:
            raise ValueError(f"Telemetry handler {handler_id!r} is already attached")
        _handlers[handler_id] = (frozenset(events), handler)


def detach(handler_id: str) -> bool:
    """Remove a handler. Returns False if none was attached under ``handler_id``."""
    with _lock:
        return _handlers.pop(handler_id, None) is not None


def execute(event: Event, measurements: Mapping[str, Any], metadata: Mapping[str, Any]) -> None:
    """Call every handler attached to ``event``.

    A handler that raises is logged and detached, the others still run.
    """
    with _lock:
        targets = [(handler_id, handler) for handler_id, (events, handler) in _handlers.items() if event in events]

    for handler_id, handler in targets:
        try:
            handler(event, measurements, metadata)
        except Exception:
            logger.exception("Telemetry handler %s failed on %s, detaching it", handler_id, ".".join(event))
            detach(handler_id)


@contextmanager
def span(metadata: Mapping[str, Any]) -> Iterator[None]:
    """Emit start, then stop or exception, around the wrapped block."""
    start = time.monotonic()
    execute(CALL_START, {"system_time": time.time(), "monotonic_time": start}, metadata)
    try:
        yield
    except Exception as e:
        now = time.monotonic()
        execute(CALL_EXCEPTION, {"duration": now - start, "monotonic_time": now}, {**metadata, "error": e})
        raise
    now = time.monotonic()
    execute(CALL_STOP, {"duration": now - start, "monotonic_time": now}, metadata)
