"""
Action implementation that calls a BAML function with streaming.

The backend stream is wrapped in a StreamHandle, so the backend call only
starts when the consumer pulls the first element and is released as soon
as the consumer stops.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..clients.registry import ClientModule
from ..stream import StreamHandle

logger = logging.getLogger(__name__)


class CallFunctionStream:
    """Runs the streaming variant of an imported function."""

    def run(self, client_module: ClientModule, arguments: Mapping[str, Any], options: Mapping[str, Any]) -> StreamHandle:
        function = options["function"]
        # Each invocation owns its own copy of the arguments and its own resource
        arguments = dict(arguments)

        def open_stream():
            if options.get("telemetry"):
                logger.info("Opening stream %s.%s", client_module.name, function)
            return client_module.stream(function, arguments)

        def on_cancel():
            logger.info("Stream %s.%s cancelled by consumer", client_module.name, function)

        return StreamHandle(open_stream, element_type=options.get("element_type"), on_cancel=on_cancel)
