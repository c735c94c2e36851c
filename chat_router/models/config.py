"""
Configuration models for the chat router.

Defines dataclasses for the YAML configuration file.
"""

from dataclasses import dataclass, field


@dataclass
class ModelConfig:
    """Configuration for the upstream chat-completion endpoint."""
    base_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 1000
    timeout: float = 60.0
    max_iterations: int = 5


@dataclass
class ToolsConfig:
    """Configuration for the external tool services."""
    weather_url: str = "https://wttr.in"
    search_url: str = "https://api.duckduckgo.com/"
    timeout: float = 10.0


@dataclass
class ServerConfig:
    """Configuration for the FastAPI server."""
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = ""
    secret_key: str = ""
    host: str = ""
    debug: bool = False

    @property
    def enabled(self) -> bool:
        """Check if Langfuse is configured (both keys present)."""
        return bool(self.public_key and self.secret_key)


@dataclass
class AppConfig:
    """
    Unified application configuration container.

    Holds all configuration sections loaded from config/config.yaml.
    """
    version: str = "1.0"
    model: ModelConfig = field(default_factory=ModelConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)

    @property
    def log_level(self) -> str:
        """Shortcut for logging.level."""
        return self.logging.level
