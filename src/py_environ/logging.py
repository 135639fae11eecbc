"""Audit log for environment changes.

When a program trims its environment before spawning a child, it is
often useful to know afterwards *what* was removed and *why*.  An
``Environ`` handed a ``Logger`` records every successful change:

- **Action** — what the store did (set, unset, keep, drop, load) plus
  ``missing`` for Keep/Drop patterns that selected nothing.
- **LogEntry** — one immutable record, carrying the names involved.
- **Logger** — an append-only trail that can answer "which variables
  have been removed so far?".

For ``keep`` the recorded names are the variables it *discarded*, so
that ``removed_keys()`` covers every way a variable can leave a store.
Failures are raised to the caller and never written here.
"""

from dataclasses import dataclass
from enum import IntEnum, StrEnum


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


class Action(StrEnum):
    """The store operation an entry records."""

    SET = "set"
    UNSET = "unset"
    KEEP = "keep"
    DROP = "drop"
    LOAD = "load"
    MISSING = "missing"


REMOVING_ACTIONS = frozenset({Action.UNSET, Action.KEEP, Action.DROP})


@dataclass(frozen=True)
class LogEntry:
    """A single audit record.

    Attributes:
        level: The severity of this event.
        action: The store operation that produced it.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "environ").
        keys: Variable names (or, for ``MISSING``, patterns) involved.

    """

    level: LogLevel
    action: Action
    message: str
    source: str
    keys: tuple[str, ...] = ()

    def __str__(self) -> str:
        """Format as ``[LEVEL] source/action: message``."""
        return f"[{self.level.name}] {self.source}/{self.action}: {self.message}"


class Logger:
    """Append-only audit trail of environment changes."""

    def __init__(self) -> None:
        """Create an empty logger."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        action: Action,
        source: str,
        keys: tuple[str, ...] = (),
    ) -> None:
        """Append a new entry to the log."""
        self._entries.append(
            LogEntry(level=level, action=action, message=message, source=source, keys=keys)
        )

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        action: Action | None = None,
    ) -> list[LogEntry]:
        """Return entries at or above *min_level* and/or for one *action*."""
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if action is not None:
            result = [e for e in result if e.action is action]
        return result if result is not self._entries else list(result)

    def keys_for(self, *actions: Action) -> list[str]:
        """Return the sorted, de-duplicated names recorded under *actions*."""
        names = {key for e in self._entries if e.action in actions for key in e.keys}
        return sorted(names)

    def removed_keys(self) -> list[str]:
        """Return every variable name removed by unset, keep or drop so far."""
        return self.keys_for(*REMOVING_ACTIONS)

    def missing_patterns(self) -> list[str]:
        """Return every Keep/Drop pattern that has matched nothing so far."""
        return self.keys_for(Action.MISSING)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)
