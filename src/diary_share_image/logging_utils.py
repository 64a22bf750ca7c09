"""
Shared logger for the share image pipeline.

Every module logs through ``logger``. Render entry points take an
optional ``log`` argument and fall back to it, so an embedding app can
route compositor warnings (skipped photos, unreadable ICC profiles) to
its own logger instead.
"""

import logging

LOGGER_NAME = "diary_share_image"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logger(
        name: str = LOGGER_NAME,
        level: int = logging.INFO,
        formatter: logging.Formatter | None = None,
        handler: logging.Handler | None = None,
) -> logging.Logger:
    """
    Return the named logger, attaching a stream handler on first use.

    Repeated calls with the same name reuse the existing handler and
    only update the level. Propagation is turned off so CLI output is
    not duplicated by a root handler.
    """
    log = logging.getLogger(name)
    log.setLevel(level)
    if log.handlers:
        return log
    handler = handler or logging.StreamHandler()
    handler.setFormatter(formatter or logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.propagate = False
    return log


def set_verbosity(*, verbose: bool = False, quiet: bool = False) -> int:
    """
    Set the shared logger level from CLI flags and return it.

    ``verbose`` exposes per-render details such as fit passes and
    skipped extra photos; ``quiet`` keeps only warnings and errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.setLevel(level)
    return level


logger = setup_logger()
