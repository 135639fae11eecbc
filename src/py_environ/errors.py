"""Errors raised by the environment store.

Absent keys and patterns that match nothing are *not* errors: ``get``
returns ``""`` and Keep/Drop report unmatched patterns in their return
value.  Only malformed input raises.
"""


class EnvironError(Exception):
    """Base class for every error raised by the environment store."""


class EnvironDecodeError(EnvironError, ValueError):
    """Raised when serialized environment data cannot be decoded."""
