"""
Current Time Tool

Reports the current time in an IANA timezone.
"""

import logging
from datetime import datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .registry import ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def get_current_time(timezone: str = DEFAULT_TIMEZONE) -> dict:
    """
    Get the current date and time in a timezone.

    Args:
        timezone: IANA timezone name, e.g. "Asia/Shanghai", "America/New_York"

    Returns:
        Dictionary with the local time, epoch milliseconds and ISO-8601 UTC
        time, or an ``error`` entry
    """
    timezone = (timezone or DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.debug("Unknown timezone '%s': %s", timezone, e)
        return {"error": f"Time lookup failed: Unknown timezone '{timezone}'"}

    now = datetime.now(dt_timezone.utc)
    local = now.astimezone(zone)

    return {
        "timezone": timezone,
        "datetime": local.strftime("%Y/%m/%d %H:%M:%S"),
        "timestamp": int(now.timestamp() * 1000),
        "iso": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


def _handle_current_time(params: dict) -> dict:
    """Handle get_current_time tool invocation."""
    return get_current_time(params.get("timezone") or DEFAULT_TIMEZONE)


TOOL = ToolDefinition(
    name="get_current_time",
    description="Get the current date and time in a specific timezone",
    parameters={
        "type": "object",
        "properties": {
            "timezone": {
                "type": ["string", "null"],
                "description": 'IANA timezone name, e.g. "Asia/Shanghai", "America/New_York", "UTC"',
                "default": DEFAULT_TIMEZONE,
            },
        },
    },
    handler=_handle_current_time,
)
