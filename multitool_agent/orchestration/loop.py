"""
Tool-calling orchestration loop.

Each request keeps a linear transcript: the system prompt, the user's
message, then alternating assistant replies and tool feedback. Per
iteration the transcript is rendered into one prompt, the completion API is
called, and the reply is either the final answer or a JSON tool call. Every
tool-level failure (unknown tool, bad parameters, tool error, crash) goes
back into the transcript so the model can correct itself; only completion
API failures abort the request.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ..config import config
from ..llm_call import CompletionClient, CompletionError, UsageTracker
from ..tools.registry import (
    ToolDefinition,
    ToolRegistry,
    ToolResult,
    ToolValidationError,
    format_result_for_llm,
)
from ..tracing import TracingContext
from .parser import ToolCallRequest, parse_tool_call
from .prompts import build_system_prompt

logger = logging.getLogger(__name__)

EXHAUSTED_MESSAGE = "Sorry, I couldn't complete the request within the iteration limit."


class OutcomeStatus(str, Enum):
    ANSWERED = "answered"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass
class InvocationOutcome:
    """Result of one chat request."""

    response: str
    status: OutcomeStatus
    tools_used: list[str] = field(default_factory=list)
    tokens: int = 0
    cost: float = 0.0
    iterations: int = 0


@dataclass
class Transcript:
    """Ordered conversation turns, each prefixed with its speaker."""

    turns: list[str] = field(default_factory=list)

    @classmethod
    def seed(cls, system_prompt: str, message: str) -> "Transcript":
        return cls(turns=[system_prompt, f"User: {message}"])

    def add_assistant(self, content: str) -> None:
        self.turns.append(f"Assistant: {content}")

    def add_user(self, content: str) -> None:
        self.turns.append(f"User: {content}")

    def render(self) -> str:
        return "\n\n".join(self.turns)

    def __len__(self) -> int:
        return len(self.turns)


class OrchestrationLoop:
    """
    Drives the exchange between the model and the tool registry.

    States: iterating -> answered | exhausted, or failed when the completion
    API gives up. A loop instance may be reused; all per-request state lives
    inside ``run``.
    """

    def __init__(
        self,
        client: Optional[CompletionClient] = None,
        registry: type[ToolRegistry] = ToolRegistry,
        max_iterations: Optional[int] = None,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ):
        self.client = client or CompletionClient()
        self.registry = registry
        self.max_iterations = max_iterations or config.orchestration.max_iterations
        self.execution_id = execution_id
        self.tracing_context = tracing_context

    @property
    def _id_prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    async def run(self, message: str) -> InvocationOutcome:
        """
        Answer a user message, calling tools as the model requests.

        Args:
            message: The user's natural-language message

        Returns:
            InvocationOutcome with the response text, tools used and usage
        """
        transcript = Transcript.seed(build_system_prompt(self.registry), message)
        usage = UsageTracker()
        tools_used: list[str] = []

        for iteration in range(1, self.max_iterations + 1):
            try:
                content = await self._complete(transcript, usage, iteration)
            except CompletionError as e:
                logger.error(f"{self._id_prefix}[ERROR] LLM call failed: {e}")
                return InvocationOutcome(
                    response=f"Error: {e}",
                    status=OutcomeStatus.FAILED,
                    iterations=iteration,
                )

            tool_call = parse_tool_call(content)
            if tool_call is None:
                logger.debug(f"{self._id_prefix}Iteration {iteration}: final answer")
                return InvocationOutcome(
                    response=content,
                    status=OutcomeStatus.ANSWERED,
                    tools_used=tools_used,
                    tokens=usage.tokens,
                    cost=usage.cost,
                    iterations=iteration,
                )

            transcript.add_assistant(content)
            feedback, used_tool = await self._handle_tool_call(tool_call, iteration)
            transcript.add_user(feedback)
            if used_tool and used_tool not in tools_used:
                tools_used.append(used_tool)

        logger.warning(
            f"{self._id_prefix}Max iterations ({self.max_iterations}) reached without final answer"
        )
        return InvocationOutcome(
            response=EXHAUSTED_MESSAGE,
            status=OutcomeStatus.EXHAUSTED,
            tools_used=tools_used,
            tokens=usage.tokens,
            cost=usage.cost,
            iterations=self.max_iterations,
        )

    async def _complete(
        self, transcript: Transcript, usage: UsageTracker, iteration: int
    ) -> str:
        """Call the completion API, inside a generation when tracing."""
        prompt = transcript.render()
        logger.debug(f"{self._id_prefix}Iteration {iteration}: calling LLM")

        if not self.tracing_context:
            return await self.client.complete(prompt, usage)

        tokens_before = usage.tokens
        with self.tracing_context.generation(
            name=f"completion_{iteration}",
            model=self.client.model,
            input=prompt,
            model_parameters={"temperature": self.client.temperature},
        ) as gen:
            try:
                content = await self.client.complete(prompt, usage)
            except CompletionError as e:
                gen.set_status("error")
                gen.set_output(str(e))
                raise
            gen.set_output(content[:2000])
            gen.set_usage(usage.tokens - tokens_before)
            return content

    async def _handle_tool_call(
        self, call: ToolCallRequest, iteration: int
    ) -> tuple[str, Optional[str]]:
        """
        Resolve, validate and run one tool call.

        Returns:
            The feedback turn for the transcript, and the tool name when the
            tool succeeded (None otherwise).
        """
        logger.info(f"{self._id_prefix}[TOOL] Attempting: {call.tool}")

        tool = self.registry.find(call.tool)
        if tool is None:
            logger.warning(f"{self._id_prefix}Unknown tool: {call.tool}")
            return f'Error: Tool "{call.tool}" not found.', None

        try:
            params = self.registry.validate(tool, call.params)
        except ToolValidationError as e:
            logger.info(f"{self._id_prefix}Invalid parameters for {call.tool}: {e}")
            return f"Error: Invalid parameters: {', '.join(e.messages)}", None

        result = await self._execute(tool, params, iteration)

        if result.crashed:
            return f"Tool execution failed: {result.error}", None
        if not result.success:
            return f"Tool Error: {result.error}", None
        return f"Tool Result: {format_result_for_llm(result)}", tool.name.value

    async def _execute(
        self, tool: ToolDefinition, params: BaseModel, iteration: int
    ) -> ToolResult:
        """Execute a tool, inside a span when tracing."""
        logger.debug(
            f"{self._id_prefix}Iteration {iteration}: executing tool '{tool.name.value}'"
        )
        if not self.tracing_context:
            return await self.registry.execute(tool, params)

        with self.tracing_context.span(
            name=f"tool:{tool.name.value}",
            input=params.model_dump(by_alias=True),
            metadata={"iteration": iteration},
        ) as span:
            result = await self.registry.execute(tool, params)
            span.set_output(result.data if result.success else result.error)
            if not result.success:
                span.set_status("error")
            return result
