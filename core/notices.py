"""User-facing progress notices and warnings."""

import logging
from enum import IntEnum
from typing import Protocol

import click

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 4000


class ProcessStep(IntEnum):
    """Stages of a processing run, numbered for display."""

    BUILD_TASK_LIST = 1
    CHECK_COLLISION = 2
    RESOLVE_COLLISION = 3


TOTAL_STEPS = len(ProcessStep)


class Notifier(Protocol):
    """Fire-and-forget sink for user notices."""

    def progress(self, message: str) -> None:
        ...

    def warning(self, message: str, duration_ms: int) -> None:
        ...


class LoggingNotifier:
    """Notifier that only writes to the log."""

    def progress(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str, duration_ms: int) -> None:
        logger.warning(message)


class ConsoleNotifier:
    """Notifier that echoes to stderr via click, and logs at debug level."""

    def progress(self, message: str) -> None:
        logger.debug(message)
        click.secho(message, err=True)

    def warning(self, message: str, duration_ms: int) -> None:
        # A terminal has no notice timeout, the duration is only logged
        logger.debug(f"Warning shown for {duration_ms}ms: {message}")
        click.secho(message, err=True, fg="yellow")


class NoticeManager:
    """Formats the messages a processing run reports to the user."""

    def __init__(self, notifier: Notifier, warning_duration_ms: int = 8000):
        self.notifier = notifier
        self.warning_duration_ms = warning_duration_ms

    @staticmethod
    def format_step(step: ProcessStep, message: str) -> str:
        return f"Step {int(step)}/{TOTAL_STEPS}: {message}"

    def step(self, step: ProcessStep, message: str):
        """Report a step status."""
        self.notifier.progress(self.format_step(step, message))

    def processing_status(self, new_count: int, update_count: int):
        """Report how many abbrlinks are about to be generated or updated."""
        parts = []
        if new_count > 0:
            parts.append(f"generating abbrlinks for {new_count} file(s)")
        if update_count > 0:
            parts.append(f"updating {update_count} abbrlink(s) of a different length")
        if not parts:
            parts.append("nothing to generate")
        self.step(ProcessStep.BUILD_TASK_LIST, ", ".join(parts) + "...")

    def collision_check(self, check_number: int):
        """Report the start of a collision check."""
        self.step(ProcessStep.CHECK_COLLISION, f"checking abbrlink collisions (check {check_number})")

    def collision_status(self, check_number: int, conflict_count: int):
        """Report the outcome of a collision check."""
        if conflict_count == 0:
            self.step(ProcessStep.RESOLVE_COLLISION, f"check {check_number} found no collisions")
        else:
            self.step(
                ProcessStep.CHECK_COLLISION,
                f"check {check_number} found {conflict_count} collision(s)",
            )

    def resolving(self, round_number: int, max_rounds: int):
        """Report the start of a reassignment round."""
        self.step(
            ProcessStep.RESOLVE_COLLISION,
            f"resolving collisions (round {round_number}/{max_rounds})...",
        )

    def collision_warning(
        self, rounds: int, conflict_count: int, current_length: int, suggested_length: int
    ):
        """Warn that collisions remain after the last round."""
        message = (
            f"Warning: {conflict_count} collision(s) remain after {rounds} round(s).\n"
            "Suggestions:\n"
            f"1. Increase the abbrlink length (current: {current_length}, "
            f"suggested: {suggested_length})\n"
            "2. Reduce the number of documents\n"
            "3. Increase the maximum number of rounds"
        )
        self.notifier.warning(message, self.warning_duration_ms)

    def failure_warning(self, failure_count: int):
        """Warn that some documents could not be processed."""
        self.notifier.warning(
            f"Warning: {failure_count} document(s) could not be processed, see the log for details",
            self.warning_duration_ms,
        )

    def completed(self, written: int, unchanged: int):
        """Report completion of a run."""
        self.notifier.progress(
            f"Abbrlinks generated successfully ({written} written, {unchanged} unchanged)"
        )

    def failed(self):
        """Report a failed run."""
        self.notifier.warning("Error generating abbrlinks!", DEFAULT_TIMEOUT_MS)
