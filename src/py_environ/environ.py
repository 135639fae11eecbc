"""Environment store — build a child's environment without touching ours.

In Unix, every process has an environment: a set of ``KEY=VALUE`` string
pairs inherited from its parent.  A program that spawns children often
wants to hand them a *restricted* environment (only ``PATH`` and
``HOME``, say, or everything except ``AWS_.*``) without mutating
``os.environ`` for itself.

``Environ`` is that scratch copy:

    - **Lenient parsing** — blank lines, ``#`` comments and entries
      without ``=`` are skipped, as when reading a ``.env`` file.
    - **Deterministic output** — ``keys()``, ``as_list()`` and JSON are
      always sorted, so two runs produce diffable results.
    - **Keep / Drop** — bulk filtering by whole-key regular expressions.
    - **Thread-safe** — one reader-writer lock per instance.

Usage::

    env = Environ.from_os()
    missing = env.keep("PATH", "HOME", "LC_.*")
    subprocess.run(cmd, env=env.as_dict())
"""

import json
import os
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager

from py_environ.errors import EnvironDecodeError
from py_environ.logging import Action, Logger, LogLevel
from py_environ.matching import matching_keys
from py_environ.sync import Locker, ReadWriteLock

LOG_SOURCE = "environ"


def parse_env_list(entries: Iterable[str]) -> dict[str, str]:
    """Turn ``key=value`` strings into a dict.

    Blank entries, ``#`` comments, entries without ``=`` and entries with
    an empty key are skipped.  Only the first ``=`` splits, so values may
    contain ``=``.  Later duplicates win.
    """
    result: dict[str, str] = {}
    for entry in entries:
        # in case we're reading a .env file with comments or blank lines
        if not entry or entry.startswith("#"):
            continue
        key, sep, value = entry.partition("=")
        if not sep or not key:
            continue
        result[key] = value
    return result


def format_env_list(env: Mapping[str, str]) -> list[str]:
    """Render a mapping as sorted ``key=value`` strings."""
    return sorted(f"{key}={value}" for key, value in env.items())


class Environ:
    """A thread-safe set of environment variables.

    Each instance owns its variables and its lock.  Reads take the lock
    shared; writes take it exclusively.
    """

    def __init__(
        self,
        entries: Iterable[str] | None = None,
        *,
        lock: Locker | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create an environment from ``key=value`` strings.

        Args:
            entries: Starting variables; malformed entries are dropped.
            lock: Lock guarding the variables (a ``ReadWriteLock`` by default).
            logger: Optional audit log for successful changes.

        """
        self._lock: Locker = lock if lock is not None else ReadWriteLock()
        self._vars: dict[str, str] = parse_env_list(entries or ())
        self._logger = logger

    @classmethod
    def from_os(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        lock: Locker | None = None,
        logger: Logger | None = None,
    ) -> "Environ":
        """Capture the current process environment.

        Args:
            environ: Mapping to capture instead of ``os.environ``.
            lock: Passed through to the constructor.
            logger: Passed through to the constructor.

        """
        source = os.environ if environ is None else environ
        return cls(format_env_list(source), lock=lock, logger=logger)

    @classmethod
    def from_json(
        cls,
        text: str | bytes,
        *,
        lock: Locker | None = None,
        logger: Logger | None = None,
    ) -> "Environ":
        """Rebuild an environment from the output of ``to_json``.

        Raises:
            EnvironDecodeError: If *text* is not a JSON list of strings.

        """
        return cls(_decode_env_list(text), lock=lock, logger=logger)

    # -- Locking --------------------------------------------------------------

    @contextmanager
    def _reading(self) -> Iterator[None]:
        self._lock.acquire_read()
        try:
            yield
        finally:
            self._lock.release_read()

    @contextmanager
    def _writing(self) -> Iterator[None]:
        self._lock.acquire_write()
        try:
            yield
        finally:
            self._lock.release_write()

    def _log(self, level: LogLevel, action: Action, message: str, keys: Iterable[str] = ()) -> None:
        if self._logger is not None:
            self._logger.log(level, message, action=action, source=LOG_SOURCE, keys=tuple(keys))

    # -- Accessors ------------------------------------------------------------

    def get(self, key: str) -> str:
        """Return the value of *key*, or ``""`` if it is not set."""
        with self._reading():
            return self._vars.get(key, "")

    def set(self, key: str, value: str) -> None:
        """Set *key* to *value* (creates or overwrites).

        Raises:
            ValueError: If *key* is empty.  Such a variable could not be
                rendered as ``key=value`` and read back.

        """
        if not key:
            msg = "Environment variable name must not be empty"
            raise ValueError(msg)
        with self._writing():
            self._vars[key] = value
        self._log(LogLevel.DEBUG, Action.SET, f"set {key}", (key,))

    def unset(self, key: str) -> None:
        """Remove *key*; unsetting a missing key is a no-op."""
        with self._writing():
            removed = self._vars.pop(key, None) is not None
        if removed:
            self._log(LogLevel.DEBUG, Action.UNSET, f"unset {key}", (key,))

    def keys(self) -> list[str]:
        """Return every variable name in lexical order."""
        with self._reading():
            return sorted(self._vars)

    def as_dict(self) -> dict[str, str]:
        """Return a copy of the variables; changing it never affects the store."""
        with self._reading():
            return dict(self._vars)

    def as_list(self) -> list[str]:
        """Return the variables as sorted ``key=value`` strings.

        This is the form a child process expects as its environment.
        """
        with self._reading():
            return format_env_list(self._vars)

    def copy(self) -> "Environ":
        """Return an independent environment with its own lock."""
        with self._reading():
            snapshot = dict(self._vars)
        clone = Environ(logger=self._logger)
        clone._vars = snapshot
        return clone

    # -- Filtering ------------------------------------------------------------

    def keep(self, *patterns: str) -> list[str]:
        """Keep only the variables whose names match one of *patterns*.

        Every pattern is a regular expression matched against the whole
        name.  Calling with no patterns empties the environment.

        Returns:
            The patterns that matched nothing, sorted.

        Raises:
            InvalidPatternError: If a pattern does not compile.  The
                environment is left untouched.

        """
        current = self.as_dict()
        matched, missing = matching_keys(current, patterns)
        kept = {key: current[key] for key in matched}
        with self._writing():
            self._vars = kept
        discarded = sorted(current.keys() - kept.keys())
        self._log(LogLevel.INFO, Action.KEEP, f"kept {len(kept)} of {len(current)} variables", discarded)
        self._log_missing(missing)
        return missing

    def drop(self, *patterns: str) -> list[str]:
        """Remove the variables whose names match one of *patterns*.

        Calling with no patterns removes nothing.

        Returns:
            The patterns that matched nothing, sorted.

        Raises:
            InvalidPatternError: If a pattern does not compile.  The
                environment is left untouched.

        """
        remaining = self.as_dict()
        matched, missing = matching_keys(remaining, patterns)
        for key in matched:
            del remaining[key]
        with self._writing():
            self._vars = remaining
        self._log(LogLevel.INFO, Action.DROP, f"dropped {len(matched)} variables", matched)
        self._log_missing(missing)
        return missing

    def _log_missing(self, missing: list[str]) -> None:
        if missing:
            message = f"patterns matched nothing: {', '.join(missing)}"
            self._log(LogLevel.WARNING, Action.MISSING, message, missing)

    # -- Serialization --------------------------------------------------------

    def to_json(self) -> str:
        """Serialize as a JSON list of sorted ``key=value`` strings."""
        return json.dumps(self.as_list())

    def load_json(self, text: str | bytes) -> None:
        """Replace the whole environment with decoded ``to_json`` output.

        Meant for freshly created instances: the swap is not guarded
        against other threads using this environment at the same time.

        Raises:
            EnvironDecodeError: If *text* is not a JSON list of strings.
                The environment is left untouched.

        """
        entries = _decode_env_list(text)
        self._vars = parse_env_list(entries)
        self._lock = ReadWriteLock()
        self._log(LogLevel.INFO, Action.LOAD, f"loaded {len(self._vars)} variables")

    # -- Dunder methods -------------------------------------------------------

    def __len__(self) -> int:
        """Return the number of variables."""
        with self._reading():
            return len(self._vars)

    def __contains__(self, key: object) -> bool:
        """Return True if *key* is set (even to an empty value)."""
        with self._reading():
            return key in self._vars

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return f"Environ({self.keys()!r})"


def _decode_env_list(text: str | bytes) -> list[str]:
    """Decode a JSON list of strings, raising ``EnvironDecodeError`` otherwise."""
    try:
        data = json.loads(text)
    except ValueError as exc:  # JSONDecodeError, or undecodable bytes
        raise EnvironDecodeError(str(exc)) from exc
    if not isinstance(data, list):
        msg = f"expected a JSON list of strings, got {type(data).__name__}"
        raise EnvironDecodeError(msg)
    for item in data:
        if not isinstance(item, str):
            msg = f"expected a JSON list of strings, found {type(item).__name__} item {item!r}"
            raise EnvironDecodeError(msg)
    return data
