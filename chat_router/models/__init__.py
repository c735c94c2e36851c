"""
Data models for the chat router.
"""

from .config import (
    ModelConfig,
    ToolsConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

__all__ = [
    "ModelConfig",
    "ToolsConfig",
    "ServerConfig",
    "LoggingConfig",
    "LangfuseConfig",
    "AppConfig",
]
