"""
Tool Registry - Single source of truth for tool definitions.

Provides a central registry for all tools with their metadata, parameter
schemas and handlers. Tool names coming from model output are mapped onto
the closed ``ToolName`` enum here and nowhere else.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    """The fixed set of tools the agent can call."""

    CALCULATOR = "calculator"
    CURRENT_TIME = "current_time"
    RANDOM_NUMBER = "random_number"
    DICE_ROLL = "dice_roll"
    COIN_FLIP = "coin_flip"
    BMI_CALCULATOR = "bmi_calculator"
    PASSWORD_GENERATOR = "password_generator"
    AGE_CALCULATOR = "age_calculator"
    WEATHER = "weather"
    VAT_CALCULATOR = "vat_calculator"
    JSON_VALIDATOR = "json_validator"


class NoParams(BaseModel):
    """Parameter schema for tools that take no arguments."""


@dataclass(frozen=True)
class ToolDefinition:
    """Metadata for a tool - defined once, used everywhere."""

    name: ToolName
    description: str
    params_model: type[BaseModel]
    handler: Callable[[Any], Awaitable[dict]]


@dataclass
class ToolResult:
    """Outcome of a single tool execution."""

    tool_name: str
    success: bool
    data: dict = field(default_factory=dict)
    error: Optional[str] = None
    crashed: bool = False


class ToolValidationError(Exception):
    """Raised when tool parameters do not match the tool's schema."""

    def __init__(self, tool_name: str, messages: list[str]):
        self.tool_name = tool_name
        self.messages = messages
        super().__init__(", ".join(messages))


def _format_validation_errors(exc: ValidationError) -> list[str]:
    """Turn pydantic errors into ``field: message`` strings."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        if location:
            messages.append(f"{location}: {error['msg']}")
        else:
            messages.append(error["msg"])
    return messages


class ToolRegistry:
    """Central registry for all tools."""

    _tools: dict[ToolName, ToolDefinition] = {}

    @classmethod
    def register(
        cls,
        name: ToolName,
        description: str,
        params_model: type[BaseModel],
        handler: Callable[[Any], Awaitable[dict]],
    ) -> None:
        """Register a tool with its metadata."""
        if name in cls._tools:
            raise ValueError(f"Tool '{name.value}' is already registered")
        cls._tools[name] = ToolDefinition(
            name=name,
            description=description,
            params_model=params_model,
            handler=handler,
        )

    @classmethod
    def find(cls, name: str) -> Optional[ToolDefinition]:
        """Get a tool by the name the model used, or None if unknown."""
        try:
            tool_name = ToolName(name)
        except ValueError:
            return None
        return cls._tools.get(tool_name)

    @classmethod
    def validate(cls, tool: ToolDefinition, raw_params: Any) -> BaseModel:
        """
        Validate raw parameters against a tool's schema.

        Raises:
            ToolValidationError: with one message per offending field.
        """
        try:
            return tool.params_model.model_validate(raw_params)
        except ValidationError as e:
            raise ToolValidationError(
                tool.name.value, _format_validation_errors(e)
            ) from e

    @classmethod
    async def execute(cls, tool: ToolDefinition, params: BaseModel) -> ToolResult:
        """
        Run a tool's handler. Never raises.

        A handler that raises is reported as a crashed failure; a handler that
        returns ``success: False`` is reported with its own error message.
        """
        try:
            data = await tool.handler(params)
        except Exception as e:
            logger.error(f"Tool execution failed: {tool.name.value} - {e}")
            return ToolResult(
                tool_name=tool.name.value,
                success=False,
                error=str(e),
                crashed=True,
            )

        if not data.get("success"):
            return ToolResult(
                tool_name=tool.name.value,
                success=False,
                data=data,
                error=data.get("error") or "Unknown error",
            )
        return ToolResult(tool_name=tool.name.value, success=True, data=data)

    @classmethod
    def all_tools(cls) -> dict[ToolName, ToolDefinition]:
        """Get a copy of all registered tools."""
        return cls._tools.copy()

    @classmethod
    def count(cls) -> int:
        """Number of registered tools."""
        return len(cls._tools)

    @classmethod
    def get_tools_summary(cls) -> str:
        """Get formatted summary of all tools for prompts."""
        lines = []
        for name, tool in cls._tools.items():
            lines.append(f"- {name.value}: {tool.description}")
        return "\n".join(lines)

    @classmethod
    def clear(cls) -> None:
        """Clear all registered tools (mainly for testing)."""
        cls._tools.clear()


def format_result_for_llm(result: ToolResult) -> str:
    """Serialize a successful tool result for the transcript."""
    return json.dumps(result.data, ensure_ascii=False, default=str)
