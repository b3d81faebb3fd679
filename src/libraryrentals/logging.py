"""Console logging for the library CLI.

Log records go to stderr through Rich. Records from third-party loggers
(SQLAlchemy mostly) are tagged with a short ``[name]`` prefix so they
stand apart from the application's own messages.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PROJECT_PREFIX = "libraryrentals"


class ThirdPartyPrefixFilter(logging.Filter):
    """Set ``record.prefix`` to ``[package]`` for non-project loggers."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith(PROJECT_PREFIX):
            record.prefix = f"[{record.name.split('.')[0]}]"
        else:
            record.prefix = ""
        return True


def config_console_handler(level: int = logging.WARNING, debug_mode: bool = False) -> RichHandler:
    """Build a RichHandler writing to stderr.

    Args:
        level: Minimum level for console output (DEBUG in debug_mode).
        debug_mode: Show timestamps, logger names and source paths.

    Returns:
        RichHandler ready to attach to the root logger.
    """
    if debug_mode:
        level = logging.DEBUG

    handler = RichHandler(
        level=level,
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
    )

    fmt = "%(prefix)s %(message)s" if not debug_mode else "%(asctime)s %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt=fmt))
    if not debug_mode:
        handler.addFilter(ThirdPartyPrefixFilter())

    return handler


def configure_logging(level: int = logging.WARNING, debug_mode: bool = False) -> logging.Logger:
    """Route all logging through a single Rich console handler.

    Calling it again replaces the previous handler rather than stacking.

    Returns:
        The project's root logger.
    """
    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, RichHandler)]:
        root.removeHandler(existing)

    handler = config_console_handler(level, debug_mode)
    root.addHandler(handler)
    root.setLevel(handler.level)

    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy").setLevel(logging.DEBUG if debug_mode else logging.WARNING)

    return logging.getLogger(PROJECT_PREFIX)
