"""
Action implementation that calls a BAML function and waits for the result.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from .. import telemetry
from ..clients.registry import ClientModule

logger = logging.getLogger(__name__)


class CallFunction:
    """Runs the synchronous variant of an imported function."""

    def run(self, client_module: ClientModule, arguments: Mapping[str, Any], options: Mapping[str, Any]) -> Any:
        function = options["function"]
        if not options.get("telemetry"):
            return client_module.call(function, dict(arguments))

        start = time.monotonic()
        logger.info("Calling %s.%s", client_module.name, function)
        try:
            with telemetry.span({"client_module": client_module.name, "function_name": function}):
                result = client_module.call(function, dict(arguments))
        except Exception:
            logger.exception("Call to %s.%s failed after %.3fs", client_module.name, function, time.monotonic() - start)
            raise
        logger.info("Call to %s.%s finished in %.3fs", client_module.name, function, time.monotonic() - start)
        return result
