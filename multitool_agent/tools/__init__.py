"""
Multi-tool agent tools package

Importing this package registers every tool with the ToolRegistry.

Available tools:
- calculator: arithmetic via SymPy
- current_time, age_calculator: date and time
- random_number, dice_roll, coin_flip, password_generator: randomness
- bmi_calculator, vat_calculator: domain calculators
- json_validator: JSON syntax check
- weather: OpenWeatherMap lookup
"""

from .registry import (
    ToolDefinition,
    ToolName,
    ToolRegistry,
    ToolResult,
    ToolValidationError,
    format_result_for_llm,
)
from . import math_solver, clock, randomness, calculators, json_validator, weather

__all__ = [
    "ToolDefinition",
    "ToolName",
    "ToolRegistry",
    "ToolResult",
    "ToolValidationError",
    "format_result_for_llm",
]
