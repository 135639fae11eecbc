"""Pattern matching for Keep/Drop — which keys does a pattern list select?

Every pattern is a regular expression that must match a *whole* key.
``PATH`` selects only ``PATH`` (not ``PATHEXT``), while ``GITHUB_.*``
selects every key starting with ``GITHUB_``.  Callers never need to
write ``^`` or ``$`` themselves.

Because keys are always scanned in sorted order, every key selected by a
literal (``PATH``) or literal-prefix (``GITHUB_.*``) pattern sits in one
contiguous run ("streak").  Once that run ends, the rest of the keys
cannot match, so the scan for that pattern stops early.  Any other
pattern (``A|C``, ``.*_PATH``) can select keys scattered through the
sorted list and is checked against every key.
"""

import re
from collections.abc import Iterable, Mapping

from py_environ.errors import EnvironError

_METACHARS = frozenset(".^$*+?{}[]\\|()")


def _streak_prefix(pattern: str) -> str | None:
    """Return the literal prefix every match of *pattern* starts with.

    None means the pattern's matches may be scattered through the sorted
    keys, so no early exit is possible.
    """
    literal = pattern.removesuffix(".*")
    if _METACHARS.intersection(literal):
        return None
    return literal


class InvalidPatternError(EnvironError):
    """Raised when a Keep/Drop pattern is not a valid regular expression.

    The whole call is rejected: no keys are kept or dropped.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        """Record the offending pattern and the compiler's complaint."""
        super().__init__(f"invalid pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.missing = [pattern]


def compile_patterns(patterns: Iterable[str]) -> dict[str, re.Pattern[str]]:
    """Compile every pattern, failing on the first one that is invalid.

    Raises:
        InvalidPatternError: If any pattern does not compile.

    """
    compiled: dict[str, re.Pattern[str]] = {}
    for pattern in patterns:
        try:
            compiled[pattern] = re.compile(pattern)
        except re.error as exc:
            raise InvalidPatternError(pattern, str(exc)) from exc
    return compiled


def matching_keys(
    env: Mapping[str, str],
    patterns: Iterable[str],
) -> tuple[list[str], list[str]]:
    """Find the keys of *env* selected by *patterns*.

    Args:
        env: The mapping to scan (only its keys are used).
        patterns: Regular expressions, each matched against whole keys.

    Returns:
        ``(matched, missing)`` — the selected keys and the patterns that
        selected nothing, both sorted.

    Raises:
        InvalidPatternError: If any pattern does not compile.

    """
    ordered = sorted(set(patterns))
    regexps = compile_patterns(ordered)
    keys = sorted(env)

    matched: set[str] = set()
    missing: list[str] = []
    for pattern in ordered:
        regex = regexps[pattern]
        prefix = _streak_prefix(pattern)
        found = False
        for key in keys:
            if regex.fullmatch(key):
                matched.add(key)
                found = True
            elif found and prefix is not None and not key.startswith(prefix):
                # streak over; sorted keys can't match again
                break
        if not found:
            missing.append(pattern)

    return sorted(matched), sorted(missing)
