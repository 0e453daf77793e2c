"""
Multi-Tool Agent - LLM chat service with deterministic tools

This package provides:
- Completion client with retry for the hosted LLM API
- Eleven utility tools (arithmetic, randomness, dates, weather, ...)
- Tool-calling orchestration loop over a plain-text transcript
- FastAPI server with health and chat endpoints
"""

from .orchestration import OrchestrationLoop, InvocationOutcome
from .llm_call import CompletionClient

__all__ = [
    "OrchestrationLoop",
    "InvocationOutcome",
    "CompletionClient",
]

__version__ = "0.1.0"
