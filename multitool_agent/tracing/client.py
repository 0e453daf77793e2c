"""
Process-wide Langfuse connection for the agent.

Uses the Langfuse SDK v3 (OpenTelemetry-based) API. Tracing is optional:
missing keys, a rejected auth check or an unreachable server leave the
client disabled and the service runs untraced.
"""

import logging
from typing import Any, Optional

from langfuse import Langfuse

from ..config import LangfuseConfig, config

logger = logging.getLogger(__name__)


class TracingClient:
    """Owns the Langfuse SDK client, or the reason there is none."""

    def __init__(self, settings: LangfuseConfig):
        self.settings = settings
        self._client: Optional[Langfuse] = None
        self._error: Optional[str] = None

        if not settings.enabled:
            self._disable("Langfuse credentials not configured", level=logging.DEBUG)
            return

        if settings.host and not settings.host.startswith(("http://", "https://")):
            logger.warning(
                f"LANGFUSE_HOST '{settings.host}' does not look like a URL "
                "(expected http://host:port or https://host:port)"
            )
        self._connect()

    def _connect(self) -> None:
        options: dict[str, Any] = {
            "public_key": self.settings.public_key,
            "secret_key": self.settings.secret_key,
            "debug": self.settings.debug,
        }
        if self.settings.host:
            options["host"] = self.settings.host

        try:
            langfuse = Langfuse(**options)
            authenticated = langfuse.auth_check()
        except Exception as e:
            self._disable(f"Langfuse unavailable: {e}")
            return

        if not authenticated:
            self._disable("Langfuse auth_check() rejected the credentials")
            return

        self._client = langfuse
        logger.info(f"Langfuse tracing enabled (host: {self.settings.host or 'default'})")

    def _disable(self, reason: str, level: int = logging.WARNING) -> None:
        self._client = None
        self._error = reason
        logger.log(level, f"Tracing disabled: {reason}")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def error(self) -> Optional[str]:
        """Why tracing is disabled, if it is."""
        return self._error

    @property
    def client(self) -> Optional[Langfuse]:
        return self._client

    def flush(self) -> None:
        """Send buffered observations; called once per chat request."""
        if self._client is None:
            return
        try:
            self._client.flush()
        except Exception as e:
            logger.warning(f"Langfuse flush failed: {e}")

    def shutdown(self) -> None:
        if self._client is None:
            return
        try:
            self._client.shutdown()
        except Exception as e:
            logger.warning(f"Langfuse shutdown failed: {e}")
        else:
            logger.info("Langfuse tracing stopped")


_tracing_client: Optional[TracingClient] = None


def init_tracing_client(settings: Optional[LangfuseConfig] = None) -> TracingClient:
    """Create the process-wide tracing client (on app startup)."""
    global _tracing_client
    _tracing_client = TracingClient(settings or config.langfuse)
    return _tracing_client


def get_tracing_client() -> Optional[TracingClient]:
    return _tracing_client


def shutdown_tracing() -> None:
    """Stop the process-wide tracing client, if one was started."""
    global _tracing_client
    if _tracing_client is not None:
        _tracing_client.shutdown()
    _tracing_client = None
