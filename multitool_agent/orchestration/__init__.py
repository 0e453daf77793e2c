"""
Orchestration package: tool-call parsing, prompts and the tool-calling loop.
"""

from .loop import (
    EXHAUSTED_MESSAGE,
    InvocationOutcome,
    OrchestrationLoop,
    OutcomeStatus,
    Transcript,
)
from .parser import ToolCallRequest, parse_tool_call, repair_json

__all__ = [
    "EXHAUSTED_MESSAGE",
    "InvocationOutcome",
    "OrchestrationLoop",
    "OutcomeStatus",
    "Transcript",
    "ToolCallRequest",
    "parse_tool_call",
    "repair_json",
]
