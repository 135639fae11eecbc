"""Tests for the environment audit log.

The logger is an append-only trail of store actions.  Beyond plain
filtering it answers the questions a caller asks after trimming an
environment: which variables went away, and which patterns found nothing.
"""

from py_environ.logging import Action, LogEntry, Logger, LogLevel

SOURCE = "environ"


def _trail() -> Logger:
    """Create a logger holding one entry per kind of store action."""
    logger = Logger()
    logger.log(LogLevel.DEBUG, "set A", action=Action.SET, source=SOURCE, keys=("A",))
    logger.log(LogLevel.DEBUG, "unset B", action=Action.UNSET, source=SOURCE, keys=("B",))
    logger.log(LogLevel.INFO, "kept 1 of 3 variables", action=Action.KEEP, source=SOURCE, keys=("C", "D"))
    logger.log(LogLevel.INFO, "dropped 2 variables", action=Action.DROP, source=SOURCE, keys=("D", "E"))
    logger.log(
        LogLevel.WARNING,
        "patterns matched nothing: X_.*",
        action=Action.MISSING,
        source=SOURCE,
        keys=("X_.*",),
    )
    return logger


class TestLogEntry:
    """Verify log entry formatting."""

    def test_entry_str_names_action(self) -> None:
        """The string form shows level, source, action and message."""
        entry = LogEntry(
            level=LogLevel.INFO,
            action=Action.DROP,
            message="dropped 2 variables",
            source=SOURCE,
        )
        assert str(entry) == "[INFO] environ/drop: dropped 2 variables"


class TestLogger:
    """Verify querying the audit trail."""

    def test_removed_keys(self) -> None:
        """Unset, keep and drop entries all count as removals, de-duplicated."""
        assert _trail().removed_keys() == ["B", "C", "D", "E"]

    def test_set_keys_are_not_removals(self) -> None:
        """Set entries are available separately."""
        assert _trail().keys_for(Action.SET) == ["A"]

    def test_missing_patterns(self) -> None:
        """Unmatched patterns are kept apart from variable names."""
        assert _trail().missing_patterns() == ["X_.*"]

    def test_filter_by_action(self) -> None:
        """Filtering by action returns only that operation's entries."""
        (entry,) = _trail().filter(action=Action.KEEP)
        assert entry.keys == ("C", "D")

    def test_filter_by_level(self) -> None:
        """Filtering should return only entries at or above the level."""
        warnings = _trail().filter(min_level=LogLevel.WARNING)
        assert [e.action for e in warnings] == [Action.MISSING]

    def test_entries_returns_copy(self) -> None:
        """Mutating the returned lists must not change the log."""
        logger = _trail()
        logger.entries.clear()
        logger.filter().clear()
        expected_entries = 5
        assert len(logger) == expected_entries

    def test_clear(self) -> None:
        """Clearing forgets removals too."""
        logger = _trail()
        logger.clear()
        assert logger.removed_keys() == []
