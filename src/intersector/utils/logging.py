"""Console and file logging for the intersector package.

Only the ``intersector`` logger is configured; modules log through
``logging.getLogger(__name__)`` and inherit its handlers. Long runs
report row progress through :class:`ProgressLogger` and wall time
through :class:`Timer`.

Example:
    >>> from intersector.utils.logging import setup_logging
    >>> log = setup_logging(verbosity=2, log_file="run.log")
    >>> log.debug("written to run.log and the console")
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

# =============================================================================
# Constants
# =============================================================================

PACKAGE_LOGGER = "intersector"

# Plain handlers carry their own timestamp and level
PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# 0 = quiet, 1 = normal, 2 = verbose
_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


# =============================================================================
# Setup Functions
# =============================================================================


def verbosity_from_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Verbosity level for the ``--verbose``/``--quiet`` flags.

    ``--quiet`` takes precedence when both are given.
    """
    if quiet:
        return 0
    return 2 if verbose else 1


def _console_handler(use_rich: bool) -> logging.Handler:
    if not use_rich:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        return handler
    # RichHandler renders level and time columns itself
    handler = RichHandler(rich_tracebacks=True, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(
    verbosity: int = 1,
    log_file: Path | str | None = None,
    use_rich: bool = True,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Existing handlers are replaced, so calling this more than once is
    safe. The file handler, when requested, records DEBUG messages
    whatever the console verbosity.

    Args:
        verbosity: 0 for warnings only, 1 for info, 2 or more for debug.
        log_file: Optional path for a plain-text log.
        use_rich: Render console output with Rich.

    Returns:
        The configured ``intersector`` logger.
    """
    console_level = _LEVELS[min(max(verbosity, 0), len(_LEVELS) - 1)]

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()

    console = _console_handler(use_rich)
    console.setLevel(console_level)
    package_logger.addHandler(console)

    if log_file is None:
        package_logger.setLevel(console_level)
    else:
        to_file = logging.FileHandler(log_file)
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(logging.Formatter(PLAIN_FORMAT))
        package_logger.addHandler(to_file)
        package_logger.setLevel(logging.DEBUG)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger under the package hierarchy."""
    return logging.getLogger(name)


# =============================================================================
# Progress Logging
# =============================================================================


class ProgressLogger:
    """Logs how many reference rows have been intersected.

    A message is emitted every ``interval`` rows and once more when the
    last row is done.

    Attributes:
        logger: Destination logger.
        total: Number of rows expected.
        interval: Rows between messages.
        count: Rows seen so far.

    Example:
        >>> progress = ProgressLogger(logger, total=len(table))
        >>> rows = list(processor.process(records, summary, progress))
        >>> progress.finish()
    """

    def __init__(
        self,
        logger: logging.Logger,
        total: int,
        interval: int = 10_000,
        description: str = "Intersecting",
    ) -> None:
        self.logger = logger
        self.total = total
        self.interval = max(interval, 1)
        self.description = description
        self.count = 0

    @property
    def percent(self) -> float:
        """Share of rows done; an empty table counts as finished."""
        if self.total <= 0:
            return 100.0
        return 100.0 * self.count / self.total

    def update(self, n: int = 1) -> None:
        """Record ``n`` more finished rows."""
        self.count += n
        at_step = self.count % self.interval == 0
        if at_step or self.count == self.total:
            self.logger.info(
                f"{self.description}: {self.count:,}/{self.total:,} ({self.percent:.1f}%)"
            )

    def finish(self) -> None:
        self.logger.debug(f"{self.description} finished after {self.count:,} rows")


# =============================================================================
# Timing Utilities
# =============================================================================


class Timer:
    """Measures the wall time of a ``with`` block and logs it.

    The duration in seconds is kept in ``elapsed`` after the block exits.

    Example:
        >>> with Timer("Intersection", logger) as timer:
        ...     run()
        >>> timer.elapsed
    """

    def __init__(self, description: str, logger: logging.Logger) -> None:
        self.description = description
        self.logger = logger
        self._started: float | None = None
        self.elapsed = 0.0

    def __enter__(self) -> Timer:
        self._started = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        if self._started is not None:
            self.elapsed = time.perf_counter() - self._started
        self.logger.info(f"{self.description} completed in {self.elapsed:.2f}s")
