"""py-environ — a thread-safe scratch copy of process environment variables.

Re-exports public symbols so callers can write::

    from py_environ import Environ, InvalidPatternError
"""

from py_environ.environ import Environ, format_env_list, parse_env_list
from py_environ.errors import EnvironDecodeError, EnvironError
from py_environ.logging import Action, LogEntry, Logger, LogLevel
from py_environ.matching import InvalidPatternError, matching_keys
from py_environ.sync import Locker, NullLock, ReadWriteLock

__all__ = [
    "Action",
    "Environ",
    "EnvironDecodeError",
    "EnvironError",
    "InvalidPatternError",
    "LogEntry",
    "LogLevel",
    "Locker",
    "Logger",
    "NullLock",
    "ReadWriteLock",
    "format_env_list",
    "matching_keys",
    "parse_env_list",
]
