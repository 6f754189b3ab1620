"""
Logger setup for nl2latex.

Configures loguru sinks once per process. Modules get a logger bound to
their component name via get_logger() and never add sinks themselves.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "{time:HH:mm:ss} | <level>{level: <7}</level> | "
    "<cyan>[{extra[context]}]</cyan> <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | [{extra[context]}] {message}"

# Every record carries a context, even from unbound callers
logger.configure(extra={"context": "app"})


def get_logger(context: str):
    """
    Return a logger whose records are tagged with a component name.

    Example:
        from nl2latex.utils.logger import get_logger

        log = get_logger("convert")
        log.info("Dispatching request #3")
    """
    return logger.bind(context=context)


def setup_logger(verbose: bool = False, log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Configure loguru sinks for an application run.

    Console output goes to stderr so stdout stays clean for CLI results.

    Args:
        verbose: Show DEBUG records on the console (default: WARNING and up)
        log_dir: If given, also write everything at DEBUG to log_dir/nl2latex.log

    Returns:
        Path to the log file, or None when only logging to the console
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if verbose else "WARNING",
        colorize=True,
    )

    if log_dir is None:
        return None

    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / "nl2latex.log"
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.debug(f"Logging to {log_file}")
    return log_file
