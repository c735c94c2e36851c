"""
Process-wide Langfuse client for the chat router.

Uses the Langfuse SDK v3 (OpenTelemetry-based) API. Tracing stays off
until both keys are configured and the startup auth check passes; while
it is off every method here does nothing, so request handling never
depends on the tracing backend.
"""

import logging
from typing import Any, Optional

from langfuse import Langfuse

logger = logging.getLogger(__name__)


class TracingClient:
    """Owns the Langfuse client and remembers why tracing is off, if it is."""

    def __init__(
        self,
        public_key: str = "",
        secret_key: str = "",
        host: str = "",
        debug: bool = False,
    ):
        self._client: Optional[Langfuse] = None
        self._error: Optional[str] = None

        if not (public_key and secret_key):
            self._disable("Langfuse credentials not configured", level=logging.DEBUG)
            return

        if host and "://" not in host:
            logger.warning(f"LANGFUSE_HOST '{host}' has no scheme; expected http(s)://host:port")

        options: dict[str, Any] = {
            "public_key": public_key,
            "secret_key": secret_key,
            "debug": debug,
        }
        if host:
            options["host"] = host

        try:
            client = Langfuse(**options)
            authenticated = client.auth_check()
        except Exception as e:
            self._disable(f"Failed to initialize Langfuse client: {e}")
            return

        if not authenticated:
            self._disable("Langfuse auth_check() failed - check LANGFUSE_HOST and keys")
            return

        self._client = client
        logger.info(f"Langfuse tracing enabled (host: {host or 'default'})")

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
        """Send buffered observations now."""
        if self._client is None:
            return
        try:
            self._client.flush()
        except Exception as e:
            logger.warning(f"Langfuse flush failed: {e}")

    def shutdown(self) -> None:
        """Flush and stop the Langfuse background exporter."""
        if self._client is None:
            return
        try:
            self._client.shutdown()
        except Exception as e:
            logger.warning(f"Langfuse shutdown failed: {e}")
        else:
            logger.info("Langfuse tracing stopped")


_tracing_client: Optional[TracingClient] = None


def init_tracing_client(
    public_key: str = "",
    secret_key: str = "",
    host: str = "",
    debug: bool = False,
) -> TracingClient:
    """Create the process-wide tracing client, replacing any previous one."""
    global _tracing_client
    _tracing_client = TracingClient(
        public_key=public_key,
        secret_key=secret_key,
        host=host,
        debug=debug,
    )
    return _tracing_client


def get_tracing_client() -> Optional[TracingClient]:
    return _tracing_client


def shutdown_tracing() -> None:
    """Shut down and forget the process-wide tracing client."""
    global _tracing_client
    if _tracing_client is not None:
        _tracing_client.shutdown()
    _tracing_client = None
