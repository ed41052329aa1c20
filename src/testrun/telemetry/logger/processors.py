# src/testrun/telemetry/logger/processors.py

"""
structlog processors used by the harness's own console output.
"""

import logging
from typing import Any

LOG_EMOJIS = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}


def add_emoji_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Prefixes the event text with an emoji for its level."""
    level_name = event_dict.get("level", method_name)
    level = logging.getLevelName(str(level_name).upper())
    emoji = LOG_EMOJIS.get(level) if isinstance(level, int) else None
    if emoji and isinstance(event_dict.get("event"), str):
        event_dict["event"] = f"{emoji} {event_dict['event']}"
    return event_dict


def remove_extra_keys_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Drops private bookkeeping keys (leading underscore) before rendering."""
    for key in [k for k in event_dict if k.startswith("_")]:
        event_dict.pop(key)
    return event_dict

# 🔼⚙️
