"""
Temporal constraints and their candidate walkers.

A constraint is an abstract, not-yet-anchored temporal expression ("Mondays",
"March", "mornings"). Given a reference interval and a :class:`Context` it
produces a :class:`Walker`: two independent lazy iterators of concrete
:class:`Interval` candidates.

- ``forward``: candidates ending after the reference start, by increasing start
- ``backward``: candidates ending at or before the reference start, by
  decreasing start

Walkers never step past ``context.max`` (forward) or ``context.min``
(backward), so a constraint with no solution always runs dry.

Constraints compose:
    Intersect(DayOfWeek(MONDAY), TimeOfDay(MORNING))   -> "Monday morning"
    Shift(Cycle(DAY), Period.of(DAY, 3))               -> "in 3 days"
    Span(DayOfWeek(MONDAY), DayOfWeek(FRIDAY))         -> "Monday to Friday"
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from itertools import chain, takewhile
from typing import Iterator, Optional
import calendar
import logging

from .moment import Context, Grain, Interval, Moment, Period, floor

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================

class DayOfWeekType(Enum):
    """Days of the week."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class MonthOfYearType(Enum):
    """Months of the year."""
    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12


class TimeOfDayType(Enum):
    """Common time-of-day periods as (start hour, end hour)."""
    DAWN = (5, 6)
    MORNING = (6, 12)
    NOON = (12, 13)
    AFTERNOON = (12, 18)
    EVENING = (18, 21)
    NIGHT = (21, 24)
    MIDNIGHT = (0, 1)


# =============================================================================
# Walker and base classes
# =============================================================================

@dataclass
class Walker:
    """Paired lazy candidate sequences. Not restartable, not shareable."""
    forward: Iterator[Interval]
    backward: Iterator[Interval]

    @classmethod
    def empty(cls) -> Walker:
        return cls(forward=iter(()), backward=iter(()))


class Constraint(ABC):
    """Base class for all temporal constraints."""

    @property
    @abstractmethod
    def grain(self) -> Grain:
        """Grain of the candidate intervals this constraint produces."""

    @abstractmethod
    def to_walker(self, reference: Interval, context: Context) -> Walker:
        """
        Walk the candidates of this constraint around ``reference``.

        Args:
            reference: The "now" interval the candidates are ordered around
            context: Admissible window for the walk

        Returns:
            A fresh :class:`Walker`
        """


class RepeatingConstraint(Constraint):
    """
    A constraint with at most one instance per calendar cycle (one Monday per
    week, one March per year).

    Subclasses set ``cycle_grain`` and implement :meth:`get_instance`; walking
    visits the cycles outward from the one holding the reference.
    """
    cycle_grain: Grain

    @abstractmethod
    def get_instance(self, cycle_start: Moment) -> Optional[Interval]:
        """The instance inside the cycle starting at ``cycle_start``, if any."""

    def to_walker(self, reference: Interval, context: Context) -> Walker:
        return Walker(
            forward=self._walk(reference, context, 1),
            backward=self._walk(reference, context, -1),
        )

    def _walk(self, reference: Interval, context: Context, step: int) -> Iterator[Interval]:
        anchor = floor(reference.start, self.cycle_grain)
        upper = context.max.end_moment()
        lower = context.min.start
        offset = 0
        while True:
            try:
                cycle_start = anchor + self.cycle_grain.delta(offset)
            except (ValueError, OverflowError):
                break
            cycle_end = Interval(start=cycle_start, grain=self.cycle_grain).end_moment()
            if (step > 0 and cycle_start >= upper) or (step < 0 and cycle_end <= lower):
                break
            try:
                instance = self.get_instance(cycle_start)
            except (ValueError, OverflowError):
                # the instance falls past the last representable moment
                instance = None
            if instance is not None and (instance.end_moment() > reference.start) == (step > 0):
                yield instance
            offset += step
        logger.debug(f"{self!r}: {'forward' if step > 0 else 'backward'} walk left the context window")


def _single_walker(interval: Interval, reference: Interval, context: Context) -> Walker:
    if interval.start >= context.max.end_moment() or interval.end_moment() <= context.min.start:
        return Walker.empty()
    if interval.end_moment() > reference.start:
        return Walker(forward=iter([interval]), backward=iter(()))
    return Walker(forward=iter(()), backward=iter([interval]))


# =============================================================================
# Repeating constraints
# =============================================================================

@dataclass
class Cycle(RepeatingConstraint):
    """
    Whole calendar units (days, weeks, months...).

    The first forward candidate is the unit containing the reference, so with
    immediacy excluded it reads as "next week", otherwise as "this week".
    """
    unit: Grain

    @property
    def grain(self) -> Grain:
        return self.unit

    @property
    def cycle_grain(self) -> Grain:
        return self.unit

    def get_instance(self, cycle_start: Moment) -> Interval:
        return Interval(start=cycle_start, grain=self.unit)


@dataclass
class DayOfWeek(RepeatingConstraint):
    """A day of the week (e.g. DayOfWeek(MONDAY))."""
    type: DayOfWeekType
    cycle_grain = Grain.WEEK

    @property
    def grain(self) -> Grain:
        return Grain.DAY

    def get_instance(self, cycle_start: Moment) -> Interval:
        return Interval(start=cycle_start + Grain.DAY.delta(self.type.value), grain=Grain.DAY)


@dataclass
class MonthOfYear(RepeatingConstraint):
    """A month of the year (e.g. MonthOfYear(MARCH))."""
    type: MonthOfYearType
    cycle_grain = Grain.YEAR

    @property
    def grain(self) -> Grain:
        return Grain.MONTH

    def get_instance(self, cycle_start: Moment) -> Interval:
        return Interval(start=cycle_start.replace(month=self.type.value), grain=Grain.MONTH)


@dataclass
class DayOfMonth(RepeatingConstraint):
    """
    A day of the month (e.g. DayOfMonth(30) -> "the 30th").

    Months too short to hold the day have no instance.
    """
    day: int
    cycle_grain = Grain.MONTH

    def __post_init__(self):
        if not 1 <= self.day <= 31:
            raise ValueError(f"Invalid day of month: {self.day}")

    @property
    def grain(self) -> Grain:
        return Grain.DAY

    def get_instance(self, cycle_start: Moment) -> Optional[Interval]:
        if self.day > calendar.monthrange(cycle_start.year, cycle_start.month)[1]:
            return None
        return Interval(start=cycle_start.replace(day=self.day), grain=Grain.DAY)


@dataclass
class HourOfDay(RepeatingConstraint):
    """A clock hour (e.g. HourOfDay(17) -> "5pm")."""
    hour: int
    cycle_grain = Grain.DAY

    def __post_init__(self):
        if not 0 <= self.hour <= 23:
            raise ValueError(f"Invalid hour of day: {self.hour}")

    @property
    def grain(self) -> Grain:
        return Grain.HOUR

    def get_instance(self, cycle_start: Moment) -> Interval:
        return Interval(start=cycle_start.replace(hour=self.hour), grain=Grain.HOUR)


@dataclass
class TimeOfDay(RepeatingConstraint):
    """A part of the day (e.g. TimeOfDay(MORNING) -> 6:00 to 12:00), with an explicit end."""
    type: TimeOfDayType
    cycle_grain = Grain.DAY

    @property
    def grain(self) -> Grain:
        return Grain.HOUR

    def get_instance(self, cycle_start: Moment) -> Interval:
        start_hour, end_hour = self.type.value
        if end_hour == 24:
            end = cycle_start + Grain.DAY.delta()
        else:
            end = cycle_start.replace(hour=end_hour)
        return Interval(start=cycle_start.replace(hour=start_hour), grain=Grain.HOUR, end=end)


# =============================================================================
# Single-candidate constraints
# =============================================================================

@dataclass
class Year(Constraint):
    """A specific year (e.g. Year(2023)), in the reference timezone."""
    digits: int

    def __post_init__(self):
        if not 1 <= self.digits <= 9999:
            raise ValueError(f"Invalid year: {self.digits}")

    @property
    def grain(self) -> Grain:
        return Grain.YEAR

    def to_walker(self, reference: Interval, context: Context) -> Walker:
        start = datetime(self.digits, 1, 1, tzinfo=reference.start.tzinfo)
        return _single_walker(Interval(start=start, grain=Grain.YEAR), reference, context)


@dataclass
class Fixed(Constraint):
    """An already concrete interval."""
    interval: Interval

    @property
    def grain(self) -> Grain:
        return self.interval.grain

    def to_walker(self, reference: Interval, context: Context) -> Walker:
        return _single_walker(self.interval, reference, context)


# =============================================================================
# Composite constraints
# =============================================================================

@dataclass
class Intersect(Constraint):
    """
    Candidates satisfying both constraints.

    The finer constraint is walked inside each candidate of the coarser one
    and clipped to it. Example: Intersect(DayOfWeek(MONDAY), TimeOfDay(MORNING)).
    """
    first: Constraint
    second: Constraint

    @property
    def grain(self) -> Grain:
        return Grain.finer(self.first.grain, self.second.grain)

    def _split(self):
        if self.first.grain.is_finer_than(self.second.grain):
            return self.second, self.first
        return self.first, self.second

    def _within(self, outer: Interval, inner: Constraint, context: Context) -> Iterator[Interval]:
        limit = outer.end_moment()
        probe = Interval.starting_at(outer.start, Grain.SECOND)
        for candidate in inner.to_walker(probe, context).forward:
            if candidate.start >= limit:
                break
            clipped = candidate.intersect(outer)
            if clipped is not None:
                yield clipped

    def _forward(self, reference: Interval, context: Context) -> Iterator[Interval]:
        outer, inner = self._split()
        for candidate in outer.to_walker(reference, context).forward:
            for clipped in self._within(candidate, inner, context):
                if clipped.end_moment() > reference.start:
                    yield clipped

    def _backward(self, reference: Interval, context: Context) -> Iterator[Interval]:
        outer, inner = self._split()
        walker = outer.to_walker(reference, context)
        # the outer candidate holding the reference may contain earlier matches
        current = takewhile(lambda candidate: candidate.start < reference.start, walker.forward)
        for candidate in chain(current, walker.backward):
            matches = [
                clipped for clipped in self._within(candidate, inner, context)
                if clipped.end_moment() <= reference.start
            ]
            yield from reversed(matches)

    def to_walker(self, reference: Interval, context: Context) -> Walker:
        return Walker(
            forward=self._forward(reference, context),
            backward=self._backward(reference, context),
        )


@dataclass
class Shift(Constraint):
    """
    Candidates of ``base`` moved by ``period``. They keep the place ``base``
    gave them in the walk, so the first forward candidate of
    Shift(Cycle(DAY), Period.of(DAY, -3)) is "3 days ago".

    Example: Shift(Cycle(DAY), Period.of(DAY, 3)) -> "in 3 days".
    """
    base: Constraint
    period: Period

    @property
    def grain(self) -> Grain:
        return self.base.grain

    def _shifted(self, candidates: Iterator[Interval]) -> Iterator[Interval]:
        for candidate in candidates:
            try:
                yield candidate.shift(self.period)
            except (ValueError, OverflowError):
                logger.debug(f"{self!r}: shifted {candidate!r} out of the supported range")
                return

    def to_walker(self, reference: Interval, context: Context) -> Walker:
        walker = self.base.to_walker(reference, context)
        return Walker(
            forward=self._shifted(walker.forward),
            backward=self._shifted(walker.backward),
        )


@dataclass
class Span(Constraint):
    """
    From a ``start`` candidate to the first ``end`` candidate at or after it.

    Example: Span(DayOfWeek(MONDAY), DayOfWeek(FRIDAY)) -> "Monday to Friday",
    a single interval with an explicit end.
    """
    start: Constraint
    end: Constraint

    @property
    def grain(self) -> Grain:
        return Grain.finer(self.start.grain, self.end.grain)

    def _join(self, first: Interval, context: Context) -> Optional[Interval]:
        probe = Interval.starting_at(first.start, Grain.SECOND)
        for last in self.end.to_walker(probe, context).forward:
            if last.start >= first.start:
                return Interval(
                    start=first.start,
                    grain=Grain.finer(first.grain, last.grain),
                    end=last.end_moment(),
                )
        return None

    def _joined(self, candidates: Iterator[Interval], context: Context, stop_on_miss: bool) -> Iterator[Interval]:
        for first in candidates:
            joined = self._join(first, context)
            if joined is not None:
                yield joined
            elif stop_on_miss:
                # later starts cannot find an end either
                return

    def to_walker(self, reference: Interval, context: Context) -> Walker:
        walker = self.start.to_walker(reference, context)
        return Walker(
            forward=self._joined(walker.forward, context, stop_on_miss=True),
            backward=self._joined(walker.backward, context, stop_on_miss=False),
        )


# =============================================================================
# Building constraints from code
# =============================================================================

def build_constraint(code: str) -> Constraint:
    """
    Safely evaluate constraint code such as ``"Intersect(DayOfWeek(MONDAY), TimeOfDay(MORNING))"``.

    Raises:
        ValueError: If the code cannot be parsed or does not build a constraint
    """
    namespace = {
        'Cycle': Cycle,
        'DayOfWeek': DayOfWeek,
        'MonthOfYear': MonthOfYear,
        'DayOfMonth': DayOfMonth,
        'HourOfDay': HourOfDay,
        'TimeOfDay': TimeOfDay,
        'Year': Year,
        'Intersect': Intersect,
        'Shift': Shift,
        'Span': Span,
        'Period': Period,
        'Grain': Grain,
    }
    for enum_type in (Grain, DayOfWeekType, MonthOfYearType, TimeOfDayType):
        namespace.update(enum_type.__members__)

    try:
        constraint = eval(code, {"__builtins__": {}}, namespace)
    except SyntaxError as e:
        raise ValueError(f"Invalid constraint syntax: {e}")
    except NameError as e:
        raise ValueError(f"Unknown constraint operator: {e}")
    except (TypeError, ValueError, AttributeError) as e:
        raise ValueError(f"Constraint evaluation error: {e}")

    if not isinstance(constraint, Constraint):
        raise ValueError(f"Code did not produce a Constraint: {type(constraint)}")
    logger.debug(f"Built constraint {constraint!r} from {code!r}")
    return constraint
