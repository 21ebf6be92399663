"""
Collect pipeline log records while an album builds.

The CLI wraps build_album() in a LogCapture and reports the warnings per
pipeline stage; warnings raised while loading the snapshot never reach
BuildResult.warnings, so the log is the complete record.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

PACKAGE_LOGGER = "photobook_toolkit"


@dataclass(frozen=True)
class CapturedLog:
    """
    Attributes:
        level: Level name (WARNING, ERROR, ...)
        source: Logger name relative to the package, e.g. layout.composer
        message: Formatted message
    """

    level: str
    source: str
    message: str


def _short_source(name: str) -> str:
    for prefix in (PACKAGE_LOGGER + ".builder.", PACKAGE_LOGGER + "."):
        if name.startswith(prefix):
            return name[len(prefix):]
    return name


class _CaptureHandler(logging.Handler):
    """Appends formatted records to a list."""

    def __init__(self, sink: List[CapturedLog], level: int):
        super().__init__(level)
        self.sink = sink
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            self.sink.append(CapturedLog(record.levelname, _short_source(record.name), message))
        except Exception:
            self.handleError(record)


class LogCapture:
    """
    Context manager that collects pipeline log records during a build.

    Example:
        >>> with LogCapture() as capture:
        ...     build_album(config)
        >>> capture.summary()
        '2 warnings (layout.composer: 1, images.cropper: 1)'
    """

    def __init__(
        self,
        logger_name: Optional[str] = PACKAGE_LOGGER,
        level: int = logging.WARNING,
    ):
        self.logger_name = logger_name
        self.level = level
        self.entries: List[CapturedLog] = []
        self._handler: Optional[_CaptureHandler] = None
        self._previous_level: Optional[int] = None

    def __enter__(self) -> "LogCapture":
        logger = logging.getLogger(self.logger_name)
        self._previous_level = logger.level
        if logger.getEffectiveLevel() > self.level:
            logger.setLevel(self.level)
        self._handler = _CaptureHandler(self.entries, self.level)
        logger.addHandler(self._handler)
        return self

    def __exit__(self, *args) -> None:
        logger = logging.getLogger(self.logger_name)
        if self._handler is not None:
            logger.removeHandler(self._handler)
            self._handler = None
        logger.setLevel(self._previous_level or logging.NOTSET)

    @property
    def warnings(self) -> List[CapturedLog]:
        return [e for e in self.entries if e.level == "WARNING"]

    def counts_by_source(self) -> Dict[str, int]:
        """Warning counts per pipeline stage, most frequent first."""
        return dict(Counter(e.source for e in self.warnings).most_common())

    def summary(self) -> str:
        counts = self.counts_by_source()
        if not counts:
            return "no warnings"
        total = sum(counts.values())
        detail = ", ".join(f"{source}: {n}" for source, n in counts.items())
        return f"{total} warning{'s' if total != 1 else ''} ({detail})"
