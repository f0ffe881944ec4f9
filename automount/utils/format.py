"""
Formatting utilities.

This module provides consistent terminal output formatting.
"""
import os
from typing import Optional


# ANSI Terminal Colors
class TermColors:
    """ANSI color codes for terminal output"""
    SUCCESS = '\033[92m'  # Green for success messages
    WARNING = '\033[93m'  # Yellow for warnings
    ERROR = '\033[91m'    # Red for errors
    SIM = '\033[96m'      # Cyan for simulation messages
    BOLD = '\033[1m'      # Bold text
    ENDC = '\033[0m'      # End color


def colorize(message: str, color: str, enabled: bool = True) -> str:
    """
    Add color to a message if color output is enabled.

    Args:
        message: The message to colorize
        color: The color to use (from TermColors)
        enabled: Whether colorization is enabled

    Returns:
        Colorized message or original message if colors disabled
    """
    if not enabled:
        return message
    return f"{color}{message}{TermColors.ENDC}"


def terminal_width(default: int = 80) -> int:
    """Return the width of the attached terminal, or a default when there is none."""
    try:
        return os.get_terminal_size().columns
    except (AttributeError, OSError):
        return default


def rule(char: str = "=", width: Optional[int] = None) -> str:
    """
    Build a horizontal separator line.

    Args:
        char: Character repeated across the line
        width: Line width, the terminal width when omitted

    Returns:
        The separator string
    """
    return char * (width or terminal_width())
