"""
Completion client for the hosted LLM API.

Sends a single rendered prompt to the OpenAI chat completions endpoint and
retries rate limits (exponential backoff) and transient network faults
(fixed delay). Token usage is added to a request-scoped UsageTracker.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import openai
from openai import AsyncOpenAI

from .config import config

logger = logging.getLogger(__name__)


class CompletionError(Exception):
    """The completion API failed and the request cannot continue."""


@dataclass
class UsageTracker:
    """Token and cost totals for one chat request."""

    tokens: int = 0
    cost: float = 0.0
    cost_per_token: float = config.completion.cost_per_token

    def add(self, total_tokens: int) -> None:
        self.tokens += total_tokens
        self.cost += total_tokens * self.cost_per_token


class CompletionClient:
    """Async client for the completion API with bounded retries."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        network_retry_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_key = api_key if api_key is not None else config.completion.api_key
        self.model = model or config.completion.model
        self.base_url = base_url if base_url is not None else config.completion.base_url
        self.temperature = (
            temperature if temperature is not None else config.completion.temperature
        )
        self.max_attempts = max_attempts or config.completion.max_attempts
        self.base_delay = (
            base_delay if base_delay is not None else config.completion.base_delay
        )
        self.network_retry_delay = (
            network_retry_delay
            if network_retry_delay is not None
            else config.completion.network_retry_delay
        )
        self._sleep = sleep
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise CompletionError("OPENAI_API_KEY is not configured")
        if self._client is None:
            # Retries are handled here, not inside the SDK
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url or None,
                max_retries=0,
            )
        return self._client

    async def _create(self, prompt: str, usage: UsageTracker) -> str:
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )
        if response.usage:
            usage.add(response.usage.total_tokens)
        return response.choices[0].message.content or ""

    async def complete(self, prompt: str, usage: UsageTracker) -> str:
        """
        Get the model's reply to a prompt.

        Args:
            prompt: The full rendered transcript
            usage: Accumulator for this request's tokens and cost

        Returns:
            The response text ("" if the model returned no content)

        Raises:
            CompletionError: on a non-retryable failure or once attempts run out
        """
        for attempt in range(1, self.max_attempts + 1):
            is_last_attempt = attempt == self.max_attempts
            try:
                return await self._create(prompt, usage)
            except CompletionError:
                raise
            except openai.RateLimitError as e:
                if is_last_attempt:
                    raise CompletionError(f"Rate limit exceeded: {e}") from e
                wait = self.base_delay * 2 ** (attempt - 1)
                logger.warning(f"[RETRY] Rate limit. Waiting {wait:.1f}s...")
                await self._sleep(wait)
            except (openai.APITimeoutError, openai.APIConnectionError) as e:
                if is_last_attempt:
                    raise CompletionError(f"Network error: {e}") from e
                logger.warning(
                    f"[RETRY] Network error. Retry {attempt}/{self.max_attempts}..."
                )
                await self._sleep(self.network_retry_delay)
            except Exception as e:
                raise CompletionError(str(e)) from e

        raise CompletionError("Max retries exceeded")
