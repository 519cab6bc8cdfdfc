import sys
from pathlib import Path
import logging

from rich.console import Console
from rich.logging import RichHandler

from buildcfg import config

# Shared by the logger, tables and status spinners
_console = Console(file=sys.stdout)

FILE_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_console() -> Console:
    return _console


def setup_logger(
    name: str = config.LOGGER_NAME,
    log_file: Path | None = None,
    verbose: bool = False,
) -> logging.Logger:
    """
    Configure the package logger: Rich output on the shared console and,
    when ``log_file`` is given, a full DEBUG transcript on disk.

    Calling it again replaces the previous handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    rich_handler = RichHandler(
        rich_tracebacks=True,
        markup=True,
        show_path=False,
        show_time=False,
        console=_console,
        show_level=verbose,
    )
    rich_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.addHandler(rich_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        logger.addHandler(fh)

    return logger
