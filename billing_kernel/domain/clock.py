"""
Clock -- Deterministic time abstraction and time-based identifiers.

Responsibility:
    Provides an injectable clock so that engine and service code never call
    ``datetime.now()`` or ``date.today()`` directly, and the id generator
    that derives opaque record ids from it.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Failure modes:
    - None. ``TimeBasedIdGenerator`` never repeats an id within a process,
      even when the clock stands still.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current time receive a Clock instance via
        constructor injection.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
        - ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def today(self) -> date:
        """Get the current calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """Production clock that returns actual system time (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until
          ``advance()`` or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 3, 20, 12, 0, 0, tzinfo=timezone.utc
        )
        self._advance_seconds = 0

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = time
        self._advance_seconds = 0

    def advance(self, seconds: int = 1) -> None:
        """Advance the clock by the specified seconds."""
        self._advance_seconds += seconds


class TimeBasedIdGenerator:
    """
    Opaque record ids derived from the clock.

    Ids are milliseconds since the epoch rendered as decimal text. When two
    ids are requested within the same millisecond (or the clock does not
    move) the counter is bumped so every id handed out is unique.
    """

    def __init__(self, clock: Clock):
        self._clock = clock
        self._last = 0

    def next_id(self) -> str:
        millis = int(self._clock.now().timestamp() * 1000)
        if millis <= self._last:
            millis = self._last + 1
        self._last = millis
        return str(millis)
