"""
Chat endpoint.

Runs one user message through the tool-calling loop and returns the answer
together with the tools used and the token/cost totals.
"""

import logging
import uuid

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..schemas import (
    BadRequestResponse,
    ChatErrorResponse,
    ChatRequest,
    ChatResponse,
)
from ...llm_call import CompletionClient
from ...orchestration import OrchestrationLoop, OutcomeStatus
from ...tracing import TracingContext

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": BadRequestResponse, "description": "Missing or invalid message"},
        500: {"model": ChatErrorResponse, "description": "Internal server error"},
    },
    summary="Chat with the agent",
    description=(
        "Send a message to the assistant. The model may call tools "
        "(calculator, weather, ...) before producing its answer."
    ),
)
async def chat(request: ChatRequest) -> ChatResponse | JSONResponse:
    """Process a chat message through the orchestration loop."""
    message = request.message
    execution_id = f"exec-{uuid.uuid4().hex[:8]}"
    logger.info(f"[{execution_id}] [REQUEST] User: {message[:50]}...")

    tracing_context = TracingContext(execution_id=execution_id)
    tracing_context.start_trace(name="chat", query=message)

    try:
        loop = OrchestrationLoop(
            client=CompletionClient(),
            execution_id=execution_id,
            tracing_context=tracing_context,
        )
        outcome = await loop.run(message)
    except Exception as e:
        logger.exception(f"[{execution_id}] [ERROR] Chat request failed: {e}")
        tracing_context.end_trace(output=str(e), status="error")
        error = ChatErrorResponse(error=str(e) or "Internal server error")
        return JSONResponse(status_code=500, content=error.model_dump(by_alias=True))

    logger.info(f"[{execution_id}] [RESPONSE] Tools used: {', '.join(outcome.tools_used)}")
    logger.info(f"[{execution_id}] [COST] ${outcome.cost:.6f} ({outcome.tokens} tokens)")

    tracing_context.end_trace(
        output=outcome.response,
        status="error" if outcome.status == OutcomeStatus.FAILED else "success",
        metadata={
            "outcome": outcome.status.value,
            "iterations": outcome.iterations,
            "tools_used": outcome.tools_used,
        },
    )

    return ChatResponse(
        response=outcome.response,
        tools_used=outcome.tools_used,
        cost=outcome.cost,
        tokens=outcome.tokens,
    )
