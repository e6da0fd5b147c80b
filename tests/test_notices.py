"""Tests for user notices."""

from unittest.mock import MagicMock

import pytest

from core.notices import ConsoleNotifier, LoggingNotifier, NoticeManager, ProcessStep


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def notices(notifier):
    return NoticeManager(notifier, warning_duration_ms=5000)


def test_format_step():
    """Test step messages carry their position."""
    assert NoticeManager.format_step(ProcessStep.CHECK_COLLISION, "x") == "Step 2/3: x"


@pytest.mark.parametrize(
    "new_count, update_count, expected",
    [
        (2, 0, "Step 1/3: generating abbrlinks for 2 file(s)..."),
        (0, 1, "Step 1/3: updating 1 abbrlink(s) of a different length..."),
        (0, 0, "Step 1/3: nothing to generate..."),
    ],
)
def test_processing_status(notices, notifier, new_count, update_count, expected):
    """Test the processing status message."""
    notices.processing_status(new_count, update_count)
    notifier.progress.assert_called_once_with(expected)


def test_collision_warning(notices, notifier):
    """Test the warning lists the remaining collisions and suggestions."""
    notices.collision_warning(rounds=3, conflict_count=2, current_length=8, suggested_length=12)

    message, duration = notifier.warning.call_args.args
    assert message.startswith("Warning: 2 collision(s) remain after 3 round(s).")
    assert "current: 8, suggested: 12" in message
    assert "Increase the maximum number of rounds" in message
    assert duration == 5000


def test_failed(notices, notifier):
    """Test failure notices use the short timeout."""
    notices.failed()
    notifier.warning.assert_called_once_with("Error generating abbrlinks!", 4000)


def test_completed(notices, notifier):
    """Test the completion message."""
    notices.completed(written=2, unchanged=1)
    notifier.progress.assert_called_once_with(
        "Abbrlinks generated successfully (2 written, 1 unchanged)"
    )


def test_console_notifier(capsys):
    """Test console notices go to stderr."""
    ConsoleNotifier().progress("Step 1/3: hello")
    ConsoleNotifier().warning("careful", 1000)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Step 1/3: hello" in captured.err
    assert "careful" in captured.err


def test_logging_notifier(caplog):
    """Test logging notices."""
    with caplog.at_level("INFO"):
        LoggingNotifier().progress("progress message")
        LoggingNotifier().warning("warning message", 1000)

    assert "progress message" in caplog.text
    assert "warning message" in caplog.text


def test_collision_warning_default_duration(notifier):
    """Test collision warnings stay up for eight seconds by default."""
    NoticeManager(notifier).collision_warning(1, 1, 8, 12)
    assert notifier.warning.call_args.args[1] == 8000
