"""
Configuration management for the multi-tool agent.

Loads all configuration from environment variables with sensible defaults
for local development.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass
class CompletionConfig:
    """Configuration for the hosted completion API."""
    api_key: str = os.getenv("OPENAI_API_KEY", "")
    base_url: str = os.getenv("OPENAI_BASE_URL", "")
    model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    temperature: float = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
    max_attempts: int = int(os.getenv("LLM_MAX_ATTEMPTS", "3"))
    base_delay: float = float(os.getenv("LLM_RETRY_BASE_DELAY", "1.0"))
    network_retry_delay: float = float(os.getenv("LLM_NETWORK_RETRY_DELAY", "1.0"))
    # USD per token, gpt-4o-mini input pricing
    cost_per_token: float = float(os.getenv("LLM_COST_PER_TOKEN", "0.00000015"))


@dataclass
class OrchestrationConfig:
    """Configuration for the tool-calling loop."""
    max_iterations: int = int(os.getenv("MAX_ITERATIONS", "5"))


@dataclass
class ToolConfig:
    """Configuration for tools that talk to the outside world."""
    weather_api_key: str = os.getenv("OPENWEATHER_API_KEY", "")
    weather_url: str = os.getenv(
        "OPENWEATHER_URL", "https://api.openweathermap.org/data/2.5/weather"
    )
    weather_timeout: float = float(os.getenv("OPENWEATHER_TIMEOUT", "5.0"))
    weather_units: str = os.getenv("OPENWEATHER_UNITS", "metric")
    weather_lang: str = os.getenv("OPENWEATHER_LANG", "de")


@dataclass
class ServerConfig:
    """Configuration for the FastAPI server."""
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))
    reload: bool = os.getenv("SERVER_RELOAD", "false").lower() == "true"
    static_dir: Path = field(
        default_factory=lambda: Path(os.getenv("STATIC_DIR", str(PACKAGE_DIR / "static")))
    )


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = os.getenv("LANGFUSE_PUBLIC_KEY", "")
    secret_key: str = os.getenv("LANGFUSE_SECRET_KEY", "")
    host: str = os.getenv("LANGFUSE_HOST", "")
    debug: bool = os.getenv("LANGFUSE_DEBUG", "false").lower() == "true"

    @property
    def enabled(self) -> bool:
        """Auto-enable when both keys are configured."""
        return bool(self.public_key and self.secret_key)


@dataclass
class Config:
    """Main configuration container."""
    completion: CompletionConfig
    orchestration: OrchestrationConfig
    tools: ToolConfig
    server: ServerConfig
    langfuse: LangfuseConfig
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def get_config() -> Config:
    """Get the application configuration."""
    return Config(
        completion=CompletionConfig(),
        orchestration=OrchestrationConfig(),
        tools=ToolConfig(),
        server=ServerConfig(),
        langfuse=LangfuseConfig(),
    )


# Global config instance
config = get_config()
