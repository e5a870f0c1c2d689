"""Logging utils"""

import os
import sys

from loguru import logger

from streamfile.settings import settings_manager


def setup_logger(level):
    """Setup the logger"""

    # Helper function to get log settings from environment or use default
    def get_log_settings(name, default_color, default_icon):
        color = os.getenv(f"STREAMFILE_LOGGER_{name}_FG", default_color)
        icon = os.getenv(f"STREAMFILE_LOGGER_{name}_ICON", default_icon)
        return f"<fg #{color}>", icon

    # TRACE: 5
    # DEBUG: 10
    # INFO: 20
    # SUCCESS: 25
    # WARNING: 30
    # ERROR: 40
    # CRITICAL: 50

    log_levels = {
        "STREAM": (5, "9B59B6", "🎞️ "),  # trace
    }

    for name, (no, default_color, default_icon) in log_levels.items():
        color, icon = get_log_settings(name, default_color, default_icon)
        # Severity can only be set once; later calls restyle the level.
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=no)
        logger.level(name, color=color, icon=icon)

    debug_color, debug_icon = get_log_settings("DEBUG", "98C1D9", "🐞")
    trace_color, trace_icon = get_log_settings("TRACE", "27F5E7", "✏️ ")
    info_color, info_icon = get_log_settings("INFO", "818589", "📰")
    warning_color, warning_icon = get_log_settings("WARNING", "ffcc00", "⚠️ ")
    critical_color, critical_icon = get_log_settings("CRITICAL", "ff0000", "")
    success_color, success_icon = get_log_settings("SUCCESS", "00ff00", "✔️ ")

    logger.level("DEBUG", color=debug_color, icon=debug_icon)
    logger.level("INFO", color=info_color, icon=info_icon)
    logger.level("WARNING", color=warning_color, icon=warning_icon)
    logger.level("CRITICAL", color=critical_color, icon=critical_icon)
    logger.level("SUCCESS", color=success_color, icon=success_icon)
    logger.level("TRACE", color=trace_color, icon=trace_icon)

    log_format = (
        "<fg #818589>{time:YY-MM-DD} {time:HH:mm:ss}</fg #818589> | "
        "<level>{level.icon}</level> <level>{level: <9}</level> | "
        "<fg #e7e7e7>{module}</fg #e7e7e7>.<fg #e7e7e7>{function}</fg #e7e7e7> - <level>{message}</level>"
    )

    handlers = [
        {
            "sink": sys.stderr,
            "level": level.upper() or "INFO",
            "format": log_format,
            "backtrace": False,
            "diagnose": False,
        }
    ]

    logger.configure(handlers=handlers)


setup_logger(settings_manager.settings.log_level)
