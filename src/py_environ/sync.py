"""Locking for the environment store — reader-writer lock and friends.

Many threads may read an ``Environ`` at the same time, but a write must
have the store to itself.  That is exactly the contract of a
**reader-writer lock**: multiple concurrent readers OR one exclusive
writer.

Think of a notice board in a hallway.  Anyone can stop and read it, and
a crowd can read it together.  When someone needs to pin up a new
notice, they wait for the readers to step away, and nobody new walks up
until the notice is pinned.

The store never talks to ``threading`` directly.  It only relies on the
small ``Locker`` protocol below, so tests (or single-threaded embedders)
can hand it a different lock without touching any call sites:

    - ``ReadWriteLock`` — the default; blocks, writer-preference.
    - ``NullLock`` — does nothing; for callers that never share a store.
"""

import threading
from typing import Protocol


class Locker(Protocol):
    """The capabilities an ``Environ`` needs from its lock."""

    def acquire_read(self) -> None:
        """Take shared access."""
        ...

    def release_read(self) -> None:
        """Give up shared access."""
        ...

    def acquire_write(self) -> None:
        """Take exclusive access."""
        ...

    def release_write(self) -> None:
        """Give up exclusive access."""
        ...


class ReadWriteLock:
    """Blocking reader-writer lock with writer preference.

    When a writer is waiting, new readers queue behind it rather than
    jumping ahead, so a steady stream of readers cannot starve writers.
    Readers already holding the lock finish normally.
    """

    def __init__(self) -> None:
        """Create an unlocked reader-writer lock."""
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._waiting_writers = 0

    @property
    def reader_count(self) -> int:
        """Return the number of active readers."""
        with self._cond:
            return self._readers

    @property
    def is_writing(self) -> bool:
        """Return whether a writer currently holds the lock."""
        with self._cond:
            return self._writing

    def acquire_read(self) -> None:
        """Block until no writer holds or is waiting for the lock."""
        with self._cond:
            while self._writing or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Release shared access, waking writers once the last reader leaves.

        Raises:
            RuntimeError: If no reader holds the lock.

        """
        with self._cond:
            if self._readers == 0:
                msg = "release_read() called without a matching acquire_read()"
                raise RuntimeError(msg)
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        """Block until there are no readers and no writer."""
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writing = True

    def release_write(self) -> None:
        """Release exclusive access and wake every waiter.

        Raises:
            RuntimeError: If no writer holds the lock.

        """
        with self._cond:
            if not self._writing:
                msg = "release_write() called without a matching acquire_write()"
                raise RuntimeError(msg)
            self._writing = False
            self._cond.notify_all()

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        if self._writing:
            state = "writing"
        elif self._readers:
            state = f"{self._readers} reader(s)"
        else:
            state = "unlocked"
        return f"ReadWriteLock({state})"


class NullLock:
    """A locker that never blocks and guards nothing."""

    def acquire_read(self) -> None:
        """Do nothing."""

    def release_read(self) -> None:
        """Do nothing."""

    def acquire_write(self) -> None:
        """Do nothing."""

    def release_write(self) -> None:
        """Do nothing."""
