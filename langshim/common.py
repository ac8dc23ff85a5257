"""
Common utilities shared across langshim modules.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


DEBUG_ENV_VAR = "LANGSHIM_DEBUG"


def is_debug_enabled(environ: dict[str, str] | None = None) -> bool:
    """Check whether debug output was requested via the environment."""
    env = os.environ if environ is None else environ
    return env.get(DEBUG_ENV_VAR, "0") == "1"


def is_interactive() -> bool:
    """
    Check whether the invocation is connected to a terminal.

    Returns:
        True if stdout is a TTY, False otherwise.
    """
    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        # Detached or closed stdout
        return False


def expand_path(value: str | os.PathLike[str], home: Path | None = None) -> Path:
    """
    Expand a leading ~ in a configured path.

    Args:
        value: Path string, possibly starting with ~
        home: Home directory to expand against (default: current user's)

    Returns:
        Expanded Path (not resolved)
    """
    text = os.fspath(value)
    if home is not None and (text == "~" or text.startswith("~/")):
        return home / text[2:] if text != "~" else home
    return Path(os.path.expanduser(text))


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or is_debug_enabled():
        from .logging_config import get_logger
        get_logger().info(msg)
