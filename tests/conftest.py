"""
Pytest configuration and fixtures for multi-tool agent tests.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from multitool_agent.llm_call import UsageTracker


@pytest.fixture
def scripted_client():
    """
    Build a completion client double that replays canned model replies.

    Each call consumes the next reply (the last one repeats once the script
    runs out). Exceptions in the script are raised instead of returned.
    Every successful call adds ``tokens_per_call`` to the request's usage.
    """

    def factory(*replies, tokens_per_call: int = 10):
        script = list(replies)
        prompts: list[str] = []

        async def complete(prompt: str, usage: UsageTracker) -> str:
            prompts.append(prompt)
            reply = script.pop(0) if len(script) > 1 else script[0]
            if isinstance(reply, Exception):
                raise reply
            usage.add(tokens_per_call)
            return reply

        client = Mock()
        client.model = "test-model"
        client.temperature = 0.0
        client.complete = AsyncMock(side_effect=complete)
        client.prompts = prompts
        return client

    return factory
