"""
Tier 1 (detailed) logging setup for ATLAS entry points.

Library modules only log through their context wrappers
(atlas/contexts/{context}/logger.py); scripts call setup_logger() once to
decide where those messages go.

Console output is written to stderr so that commands printing machine-readable
results on stdout (e.g., `optimize --json`) stay parseable.
"""

import os
import platform
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from dotenv import load_dotenv
from loguru import logger

import atlas

load_dotenv()

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

# Settings worth recording at the top of every run log
_PROVENANCE_ENV = ("LATEX_RUNNER", "LATEX_DOCKER_IMAGE", "LLM_PROVIDER", "LLM_MODEL")


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
) -> Path:
    """
    Route loguru output to a per-session log file and the console.

    Replaces every existing sink. The file receives DEBUG and above; the
    console receives INFO and above (DEBUG with verbose=True).

    Args:
        context_name: Session identifier, used as the log file stem (e.g., "optimize")
        log_dir: Directory for this logging session (created if missing)
        extra_provenance: Key-value pairs added to the provenance header
        verbose: Also show DEBUG messages on the console

    Returns:
        Path to the log file
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if verbose else "INFO",
        colorize=True,
    )

    log_provenance(context_name, extra_provenance)
    return log_file


def log_provenance(context_name: str, extra_provenance: Optional[Dict[str, Any]] = None) -> None:
    """Write the session header: command line, versions, toolchain settings, extras."""
    header = {
        "Session": context_name,
        "Command": " ".join(sys.argv),
        "Working directory": Path.cwd(),
        "ATLAS": atlas.__version__,
        "Python": platform.python_version(),
    }
    for env_var in _PROVENANCE_ENV:
        if os.getenv(env_var):
            header[env_var] = os.getenv(env_var)
    header.update(extra_provenance or {})

    width = max(len(key) for key in header)
    logger.info("=" * 80)
    for key, value in header.items():
        logger.info(f"{key:<{width}} : {value}")
    logger.info("=" * 80)


def prefixed_log_functions(prefix: str) -> Tuple[Callable[[str], None], ...]:
    """
    Build the (info, success, error, warning, debug) wrappers for a context.

    Each wrapper prepends the context prefix and reports the caller's location,
    not the wrapper's, in the log record.

    Example:
        _log_info, _log_success, _log_error, _log_warning, _log_debug = (
            prefixed_log_functions("[render]")
        )
    """

    def wrapper(level: str) -> Callable[[str], None]:
        def log(message: str) -> None:
            logger.opt(depth=1).log(level, f"{prefix} {message}")

        log.__name__ = f"_log_{level.lower()}"
        log.__doc__ = f"Log {level.lower()} message with {prefix} prefix."
        return log

    return tuple(wrapper(level) for level in ("INFO", "SUCCESS", "ERROR", "WARNING", "DEBUG"))
