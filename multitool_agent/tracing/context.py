"""
Request-scoped tracing context using Langfuse SDK v3.

One trace per chat request, with nested observations for completion calls
(generations) and tool executions (spans). Nesting follows the SDK's
OpenTelemetry context, so observations must be opened and closed in
``with`` order. Every method is a no-op when tracing is disabled.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

from .client import get_tracing_client

logger = logging.getLogger(__name__)


def _tracing_enabled() -> bool:
    client = get_tracing_client()
    return client is not None and client.enabled and client.client is not None


@dataclass
class ObservationContext:
    """A single span or generation inside a trace."""

    name: str
    as_type: str = "span"
    enabled: bool = False
    attributes: dict = field(default_factory=dict)
    _context_manager: Any = field(default=None, repr=False)
    _observation: Any = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)
    _output: Any = field(default=None, repr=False)
    _usage: Optional[dict] = field(default=None, repr=False)
    _status: str = field(default="success", repr=False)

    def start(self) -> None:
        if not self.enabled:
            return

        client = get_tracing_client()
        if not client or not client.client:
            return

        try:
            self._start_time = time.time()
            self._context_manager = client.client.start_as_current_observation(
                as_type=self.as_type,
                name=self.name,
                **self.attributes,
            )
            self._observation = self._context_manager.__enter__()
        except Exception as e:
            logger.warning(f"Failed to start {self.as_type} '{self.name}': {e}")
            self._observation = None

    def end(self) -> None:
        if not self.enabled or not self._observation:
            return

        try:
            duration_ms = (time.time() - self._start_time) * 1000
            update_kwargs: dict[str, Any] = {
                "metadata": {"status": self._status, "duration_ms": round(duration_ms, 2)}
            }
            if self._output is not None:
                update_kwargs["output"] = self._output
            if self._usage:
                update_kwargs["usage_details"] = self._usage
            if self._status == "error":
                update_kwargs["level"] = "ERROR"

            self._observation.update(**update_kwargs)
            self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning(f"Failed to end {self.as_type} '{self.name}': {e}")

    def set_output(self, output: Any) -> None:
        self._output = output

    def set_status(self, status: str) -> None:
        self._status = status

    def set_usage(self, total_tokens: int) -> None:
        """Record token usage (generations only)."""
        self._usage = {"total": total_tokens}


@dataclass
class TracingContext:
    """
    Tracing state for one API request.

    Usage:
        ctx = TracingContext(execution_id="exec-1234abcd")
        ctx.start_trace(name="chat", query=message)
        with ctx.span("tool:calculator", input=params) as span:
            span.set_output(result)
        ctx.end_trace(output=answer)
    """

    execution_id: str
    _enabled: bool = field(default=False, repr=False)
    _context_manager: Any = field(default=None, repr=False)
    _root_span: Any = field(default=None, repr=False)
    _start_time: float = field(default_factory=time.time, repr=False)

    def __post_init__(self):
        self._enabled = _tracing_enabled()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def start_trace(
        self,
        name: str = "chat",
        query: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        """Open the root span that holds every observation of this request."""
        if not self._enabled:
            return

        client = get_tracing_client()
        if not client or not client.client:
            return

        try:
            trace_metadata = {"execution_id": self.execution_id, **(metadata or {})}
            self._context_manager = client.client.start_as_current_observation(
                as_type="span",
                name=name,
                input={"query": query} if query else None,
                metadata=trace_metadata,
            )
            self._root_span = self._context_manager.__enter__()
            self._start_time = time.time()
        except Exception as e:
            logger.warning(f"[{self.execution_id}] Failed to start trace: {e}")
            self._root_span = None

    def end_trace(
        self,
        output: Optional[str] = None,
        status: str = "success",
        metadata: Optional[dict] = None,
    ) -> None:
        """Close the root span and flush."""
        if not self._enabled or not self._root_span:
            return

        try:
            duration_ms = (time.time() - self._start_time) * 1000
            self._root_span.update(
                output=output,
                metadata={
                    "status": status,
                    "duration_ms": round(duration_ms, 2),
                    **(metadata or {}),
                },
            )
            self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning(f"[{self.execution_id}] Failed to end trace: {e}")
        finally:
            self._root_span = None

        client = get_tracing_client()
        if client:
            client.flush()

    @contextmanager
    def span(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> Generator[ObservationContext, None, None]:
        """Create a span, e.g. for a tool execution."""
        observation = ObservationContext(
            name=name,
            as_type="span",
            enabled=self._enabled,
            attributes={"input": input, "metadata": metadata},
        )
        try:
            observation.start()
            yield observation
        finally:
            observation.end()

    @contextmanager
    def generation(
        self,
        name: str,
        model: str,
        input: Optional[Any] = None,
        model_parameters: Optional[dict] = None,
    ) -> Generator[ObservationContext, None, None]:
        """Create a generation for an LLM call."""
        observation = ObservationContext(
            name=name,
            as_type="generation",
            enabled=self._enabled,
            attributes={
                "model": model,
                "input": input,
                "model_parameters": model_parameters,
            },
        )
        try:
            observation.start()
            yield observation
        finally:
            observation.end()
