"""
Actions synthesized from imported BAML functions.
"""

from __future__ import annotations

from .call_function import CallFunction
from .call_stream import CallFunctionStream
from .registry import ActionRegistry
from .spec import STREAM_SUFFIX, ActionKind, ActionSpec, ArgumentSpec, ImplementationBinding
from .synthesizer import action_name, stream_action_name, synthesize_actions

__all__ = [
    "STREAM_SUFFIX",
    "ActionKind",
    "ActionRegistry",
    "ActionSpec",
    "ArgumentSpec",
    "CallFunction",
    "CallFunctionStream",
    "ImplementationBinding",
    "action_name",
    "stream_action_name",
    "synthesize_actions",
]
