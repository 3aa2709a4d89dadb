"""Progress collaborators driven by SyncStore.synchronize.

Every synchronize call signals start() once, followed by exactly one of
finish() or fail().
"""

from __future__ import annotations

import logging
from typing import Protocol


class Progress(Protocol):
    """Interface for a progress indicator."""

    def start(self) -> None:
        """A synchronization began."""
        ...

    def finish(self) -> None:
        """The build list was fetched."""
        ...

    def fail(self) -> None:
        """The build list could not be fetched."""
        ...


class NullProgress:
    """Progress indicator that ignores all signals."""

    def start(self) -> None:
        pass

    def finish(self) -> None:
        pass

    def fail(self) -> None:
        pass


class LoggingProgress:
    """Progress indicator that writes each signal to a logger."""

    def __init__(self, logger: logging.Logger | None = None, label: str = "sync") -> None:
        self.logger = logger or logging.getLogger("duckboard.sync.progress")
        self.label = label

    def start(self) -> None:
        self.logger.debug("%s started", self.label)

    def finish(self) -> None:
        self.logger.info("%s finished", self.label)

    def fail(self) -> None:
        self.logger.warning("%s failed", self.label)


class CompositeProgress:
    """Forwards every signal to several progress indicators, in order."""

    def __init__(self, *targets: Progress) -> None:
        self.targets = list(targets)

    def start(self) -> None:
        for target in self.targets:
            target.start()

    def finish(self) -> None:
        for target in self.targets:
            target.finish()

    def fail(self) -> None:
        for target in self.targets:
            target.fail()
