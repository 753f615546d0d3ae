"""
Logger setup for cached_dns_resolve
"""
import logging

from rich.logging import RichHandler

from .types import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def init_logger(config: LoggingConfig) -> logging.Logger:
    """
    Configure and return the named logger.

    A handler is attached only the first time a logger is initialised, and
    from then on the logger does not propagate to the root logger. Later
    calls just adjust the level.
    """
    log = logging.getLogger(config.name)
    log.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    if not log.handlers:
        if config.pretty:
            handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        log.addHandler(handler)
        log.propagate = False

    return log
