"""Logging utilities for lifesim ticks.

Provides color-coded console output for the orchestrator passes. Output is
governed by ``Config.LOG_LEVEL``: QUIET prints nothing, INFO prints one line
per pass, VERBOSE also prints individual life events.
"""

import os
from enum import Enum

from .config import Config


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Deterministic passes (aging, aggregation)
    YELLOW = "\033[93m"    # Stochastic events (hires, elections, births)
    RED = "\033[91m"       # Errors and aborted ticks
    GREEN = "\033[92m"     # Success/commit
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_EVENT = "[~]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if LIFESIM_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("LIFESIM_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def is_quiet() -> bool:
    return Config.LOG_LEVEL == "QUIET"


def is_verbose() -> bool:
    return Config.LOG_LEVEL == "VERBOSE" or bool(os.getenv("LIFESIM_VERBOSE"))


def log_deterministic(message: str) -> None:
    """Log a deterministic pass (blue)."""
    if not is_quiet():
        print(colored(f"  {LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_event(message: str) -> None:
    """Log an individual life event (yellow). Only shown in verbose mode."""
    if is_verbose() and not is_quiet():
        print(colored(f"    {LOG_TAG_EVENT} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error (red). Always shown."""
    print(colored(f"  {LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    if not is_quiet():
        print(colored(f"  {LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    if not is_quiet():
        print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))
