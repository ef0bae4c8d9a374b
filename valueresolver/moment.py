"""
Calendar primitives used by the resolver.

Moments are timezone-aware ``datetime`` objects. An :class:`Interval` is a
span ``[start, end)`` tagged with the :class:`Grain` it is aligned to; when it
has no explicit end it covers exactly one grain from its start.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

Moment = datetime


# =============================================================================
# Grain
# =============================================================================

class Grain(Enum):
    """Units of calendar granularity, finest first."""
    SECOND = "SECOND"
    MINUTE = "MINUTE"
    HOUR = "HOUR"
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    QUARTER = "QUARTER"
    YEAR = "YEAR"

    @property
    def rank(self) -> int:
        return _GRAIN_ORDER.index(self)

    def is_finer_than(self, other: Grain) -> bool:
        return self.rank < other.rank

    @staticmethod
    def finer(a: Grain, b: Grain) -> Grain:
        return a if a.rank <= b.rank else b

    @staticmethod
    def coarser(a: Grain, b: Grain) -> Grain:
        return a if a.rank >= b.rank else b

    def delta(self, n: int = 1) -> relativedelta:
        """A ``relativedelta`` spanning ``n`` units of this grain."""
        if self == Grain.SECOND:
            return relativedelta(seconds=n)
        elif self == Grain.MINUTE:
            return relativedelta(minutes=n)
        elif self == Grain.HOUR:
            return relativedelta(hours=n)
        elif self == Grain.DAY:
            return relativedelta(days=n)
        elif self == Grain.WEEK:
            return relativedelta(weeks=n)
        elif self == Grain.MONTH:
            return relativedelta(months=n)
        elif self == Grain.QUARTER:
            return relativedelta(months=3 * n)
        return relativedelta(years=n)


_GRAIN_ORDER = (
    Grain.SECOND, Grain.MINUTE, Grain.HOUR, Grain.DAY,
    Grain.WEEK, Grain.MONTH, Grain.QUARTER, Grain.YEAR,
)


def moment_from_secs(secs: int, tz) -> Moment:
    """The moment ``secs`` seconds after the Unix epoch, expressed in ``tz``."""
    return datetime.fromtimestamp(secs, tz)


def floor(moment: Moment, grain: Grain) -> Moment:
    """Start of the ``grain`` period containing ``moment``. Weeks start on Monday."""
    moment = moment.replace(microsecond=0)
    if grain == Grain.SECOND:
        return moment
    moment = moment.replace(second=0)
    if grain == Grain.MINUTE:
        return moment
    moment = moment.replace(minute=0)
    if grain == Grain.HOUR:
        return moment
    moment = moment.replace(hour=0)
    if grain == Grain.DAY:
        return moment
    if grain == Grain.WEEK:
        return moment - relativedelta(days=moment.weekday())
    if grain == Grain.MONTH:
        return moment.replace(day=1)
    if grain == Grain.QUARTER:
        return moment.replace(month=(moment.month - 1) // 3 * 3 + 1, day=1)
    return moment.replace(month=1, day=1)


# =============================================================================
# Period
# =============================================================================

@dataclass(frozen=True)
class Period:
    """
    A length of time made of per-grain amounts (e.g. 2 hours and 30 minutes).

    Like a duration it has no anchor; it only moves moments around.
    """
    components: Tuple[Tuple[Grain, int], ...] = ()

    @classmethod
    def of(cls, grain: Grain, value: int) -> Period:
        return cls._normalized({grain: value})

    @classmethod
    def _normalized(cls, amounts) -> Period:
        items = sorted(
            ((grain, value) for grain, value in amounts.items() if value),
            key=lambda item: item[0].rank,
            reverse=True,
        )
        return cls(tuple(items))

    def get(self, grain: Grain) -> int:
        return dict(self.components).get(grain, 0)

    def __add__(self, other: Period) -> Period:
        amounts = dict(self.components)
        for grain, value in other.components:
            amounts[grain] = amounts.get(grain, 0) + value
        return Period._normalized(amounts)

    def __neg__(self) -> Period:
        return Period(tuple((grain, -value) for grain, value in self.components))

    def to_relativedelta(self) -> relativedelta:
        delta = relativedelta()
        for grain, value in self.components:
            delta += grain.delta(value)
        return delta

    def __repr__(self) -> str:
        parts = ", ".join(f"{grain.value}={value}" for grain, value in self.components)
        return f"Period({parts})"


# =============================================================================
# Interval
# =============================================================================

@dataclass(frozen=True)
class Interval:
    """A span of time ``[start, end)``. ``end`` is optional."""
    start: Moment
    grain: Grain
    end: Optional[Moment] = None

    @classmethod
    def starting_at(cls, moment: Moment, grain: Grain) -> Interval:
        return cls(start=moment, grain=grain)

    @classmethod
    def cycle(cls, moment: Moment, grain: Grain) -> Interval:
        """The ``grain``-aligned interval containing ``moment``."""
        return cls(start=floor(moment, grain), grain=grain)

    def end_moment(self) -> Moment:
        if self.end is not None:
            return self.end
        try:
            return self.start + self.grain.delta()
        except (ValueError, OverflowError):
            # the last grain of year 9999 ends at the last representable moment
            return datetime.max.replace(tzinfo=self.start.tzinfo)

    def intersect(self, other: Interval) -> Optional[Interval]:
        start = max(self.start, other.start)
        end = min(self.end_moment(), other.end_moment())
        if start >= end:
            return None
        grain = Grain.finer(self.grain, other.grain)
        result = Interval(start=start, grain=grain)
        if self.end is None and other.end is None and end == result.end_moment():
            return result
        return Interval(start=start, grain=grain, end=end)

    def contains(self, moment: Moment) -> bool:
        return self.start <= moment < self.end_moment()

    def shift(self, period: Period) -> Interval:
        delta = period.to_relativedelta()
        end = self.end + delta if self.end is not None else None
        return Interval(start=self.start + delta, grain=self.grain, end=end)

    def __repr__(self) -> str:
        if self.end is not None:
            return f"Interval({self.start.isoformat()} / {self.end.isoformat()}, grain={self.grain.value})"
        return f"Interval({self.start.isoformat()}, grain={self.grain.value})"


# =============================================================================
# Context
# =============================================================================

@dataclass(frozen=True)
class Context:
    """
    The reference interval ("now") and the admissible window ``[min, max]``
    that walkers stay inside.
    """
    reference: Interval
    min: Interval
    max: Interval

    @classmethod
    def for_reference(cls, now: Interval, years_before: int = 100, years_after: int = 100) -> Context:
        """Derive ``min``/``max`` as year intervals around the reference year."""
        year = Interval.cycle(now.start, Grain.YEAR)
        # datetime only covers years 1..9999
        years_before = min(years_before, year.start.year - 1)
        years_after = min(years_after, 9999 - year.start.year)
        return cls(
            reference=now,
            min=year.shift(Period.of(Grain.YEAR, -years_before)),
            max=year.shift(Period.of(Grain.YEAR, years_after)),
        )

    def is_consistent(self) -> bool:
        return self.min.start <= self.reference.start < self.max.end_moment()
