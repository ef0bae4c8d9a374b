"""
Tests for the constraint library and its walkers.
"""

import pytest
from datetime import datetime, timezone
from itertools import islice

from valueresolver.constraint import (
    Constraint, Cycle, DayOfMonth, DayOfWeek, DayOfWeekType, Fixed, HourOfDay,
    Intersect, MonthOfYear, MonthOfYearType, Shift, Span, TimeOfDay,
    TimeOfDayType, Year, build_constraint,
)
from valueresolver.moment import Context, Grain, Interval, Period

UTC = timezone.utc


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def context_at(*args):
    return Context.for_reference(Interval.starting_at(utc(*args), Grain.SECOND))


def starts(iterator, n):
    return [interval.start for interval in islice(iterator, n)]


@pytest.fixture
def epoch():
    """1970-01-01T00:00:00Z, a Thursday."""
    return context_at(1970, 1, 1)


class TestRepeatingWalkers:
    """Forward candidates end after the reference; backward ones before it."""

    def test_day_of_week(self, epoch):
        walker = DayOfWeek(DayOfWeekType.MONDAY).to_walker(epoch.reference, epoch)
        assert starts(walker.forward, 3) == [utc(1970, 1, 5), utc(1970, 1, 12), utc(1970, 1, 19)]
        assert starts(walker.backward, 2) == [utc(1969, 12, 29), utc(1969, 12, 22)]

    def test_day_of_week_containing_reference(self, epoch):
        walker = DayOfWeek(DayOfWeekType.THURSDAY).to_walker(epoch.reference, epoch)
        first = next(walker.forward)
        assert first == Interval(start=utc(1970, 1, 1), grain=Grain.DAY)
        assert first.intersect(epoch.reference) is not None
        assert next(walker.backward).start == utc(1969, 12, 25)

    def test_cycle(self, epoch):
        walker = Cycle(Grain.MONTH).to_walker(epoch.reference, epoch)
        assert starts(walker.forward, 2) == [utc(1970, 1, 1), utc(1970, 2, 1)]
        assert next(walker.backward) == Interval(start=utc(1969, 12, 1), grain=Grain.MONTH)

    def test_week_cycle_starts_on_monday(self, epoch):
        walker = Cycle(Grain.WEEK).to_walker(epoch.reference, epoch)
        assert next(walker.forward).start == utc(1969, 12, 29)

    def test_month_of_year(self, epoch):
        walker = MonthOfYear(MonthOfYearType.MARCH).to_walker(epoch.reference, epoch)
        assert next(walker.forward) == Interval(start=utc(1970, 3, 1), grain=Grain.MONTH)
        assert next(walker.backward) == Interval(start=utc(1969, 3, 1), grain=Grain.MONTH)

    def test_day_of_month_skips_short_months(self):
        context = context_at(1970, 2, 10)
        walker = DayOfMonth(31).to_walker(context.reference, context)
        assert starts(walker.forward, 2) == [utc(1970, 3, 31), utc(1970, 5, 31)]
        assert next(walker.backward).start == utc(1970, 1, 31)

    def test_hour_of_day(self, epoch):
        walker = HourOfDay(17).to_walker(epoch.reference, epoch)
        assert starts(walker.forward, 2) == [utc(1970, 1, 1, 17), utc(1970, 1, 2, 17)]
        assert next(walker.backward).start == utc(1969, 12, 31, 17)

    def test_time_of_day_has_explicit_end(self, epoch):
        walker = TimeOfDay(TimeOfDayType.NIGHT).to_walker(epoch.reference, epoch)
        night = next(walker.forward)
        assert night.start == utc(1970, 1, 1, 21)
        assert night.end == utc(1970, 1, 2)
        assert night.grain == Grain.HOUR

    def test_walk_stays_inside_window(self):
        now = Interval.starting_at(utc(1970, 1, 1), Grain.SECOND)
        year = Interval(start=utc(1970, 1, 1), grain=Grain.YEAR)
        context = Context(reference=now, min=year, max=year)
        mondays = list(DayOfWeek(DayOfWeekType.MONDAY).to_walker(now, context).forward)
        assert len(mondays) == 52
        assert mondays[-1].start == utc(1970, 12, 28)

    def test_sequences_are_independent(self, epoch):
        walker = Cycle(Grain.DAY).to_walker(epoch.reference, epoch)
        next(walker.forward)
        assert next(walker.backward).start == utc(1969, 12, 31)
        assert next(walker.forward).start == utc(1970, 1, 2)

    @pytest.mark.parametrize("build", [lambda: DayOfMonth(0), lambda: DayOfMonth(32), lambda: HourOfDay(24)])
    def test_invalid_values(self, build):
        with pytest.raises(ValueError):
            build()


class TestSingleCandidates:

    def test_future_year(self, epoch):
        walker = Year(1975).to_walker(epoch.reference, epoch)
        assert list(walker.forward) == [Interval(start=utc(1975, 1, 1), grain=Grain.YEAR)]
        assert list(walker.backward) == []

    def test_current_year_is_forward(self, epoch):
        walker = Year(1970).to_walker(epoch.reference, epoch)
        assert next(walker.forward).start == utc(1970, 1, 1)

    def test_past_year(self, epoch):
        walker = Year(1960).to_walker(epoch.reference, epoch)
        assert list(walker.forward) == []
        assert next(walker.backward).start == utc(1960, 1, 1)

    def test_year_outside_window(self, epoch):
        walker = Year(1500).to_walker(epoch.reference, epoch)
        assert list(walker.forward) == []
        assert list(walker.backward) == []

    def test_fixed(self, epoch):
        interval = Interval(start=utc(1970, 6, 1), grain=Grain.DAY, end=utc(1970, 6, 3))
        walker = Fixed(interval).to_walker(epoch.reference, epoch)
        assert next(walker.forward) == interval
        assert Fixed(interval).grain == Grain.DAY


class TestCompositeWalkers:

    def test_intersect_monday_morning(self, epoch):
        constraint = Intersect(DayOfWeek(DayOfWeekType.MONDAY), TimeOfDay(TimeOfDayType.MORNING))
        assert constraint.grain == Grain.HOUR
        walker = constraint.to_walker(epoch.reference, epoch)
        assert list(islice(walker.forward, 2)) == [
            Interval(start=utc(1970, 1, 5, 6), grain=Grain.HOUR, end=utc(1970, 1, 5, 12)),
            Interval(start=utc(1970, 1, 12, 6), grain=Grain.HOUR, end=utc(1970, 1, 12, 12)),
        ]
        assert next(walker.backward).start == utc(1969, 12, 29, 6)

    def test_intersect_is_symmetric(self, epoch):
        a = Intersect(TimeOfDay(TimeOfDayType.MORNING), DayOfWeek(DayOfWeekType.MONDAY))
        b = Intersect(DayOfWeek(DayOfWeekType.MONDAY), TimeOfDay(TimeOfDayType.MORNING))
        assert next(a.to_walker(epoch.reference, epoch).forward) == next(b.to_walker(epoch.reference, epoch).forward)

    def test_intersect_splits_current_outer_candidate(self):
        context = context_at(1970, 1, 1, 15)
        constraint = Intersect(Cycle(Grain.DAY), HourOfDay(9))
        walker = constraint.to_walker(context.reference, context)
        assert next(walker.forward).start == utc(1970, 1, 2, 9)
        assert next(walker.backward).start == utc(1970, 1, 1, 9)

    def test_intersect_without_solution_runs_dry(self, epoch):
        constraint = Intersect(MonthOfYear(MonthOfYearType.FEBRUARY), DayOfMonth(30))
        walker = constraint.to_walker(epoch.reference, epoch)
        assert next(walker.forward, None) is None
        assert next(walker.backward, None) is None

    def test_fifth_of_march(self, epoch):
        constraint = Intersect(MonthOfYear(MonthOfYearType.MARCH), DayOfMonth(5))
        walker = constraint.to_walker(epoch.reference, epoch)
        assert next(walker.forward) == Interval(start=utc(1970, 3, 5), grain=Grain.DAY)
        assert next(walker.backward) == Interval(start=utc(1969, 3, 5), grain=Grain.DAY)

    def test_shift(self, epoch):
        walker = Shift(Cycle(Grain.DAY), Period.of(Grain.DAY, 3)).to_walker(epoch.reference, epoch)
        assert next(walker.forward) == Interval(start=utc(1970, 1, 4), grain=Grain.DAY)

    def test_span(self, epoch):
        constraint = Span(DayOfWeek(DayOfWeekType.MONDAY), DayOfWeek(DayOfWeekType.FRIDAY))
        walker = constraint.to_walker(epoch.reference, epoch)
        assert next(walker.forward) == Interval(start=utc(1970, 1, 5), grain=Grain.DAY, end=utc(1970, 1, 10))
        assert next(walker.backward) == Interval(start=utc(1969, 12, 29), grain=Grain.DAY, end=utc(1970, 1, 3))

    def test_span_without_end(self, epoch):
        constraint = Span(DayOfWeek(DayOfWeekType.MONDAY), Year(1960))
        assert next(constraint.to_walker(epoch.reference, epoch).forward, None) is None


class TestBuildConstraint:
    """Safe evaluation of constraint code."""

    def test_composite(self):
        constraint = build_constraint("Intersect(DayOfWeek(MONDAY), TimeOfDay(MORNING))")
        assert constraint == Intersect(DayOfWeek(DayOfWeekType.MONDAY), TimeOfDay(TimeOfDayType.MORNING))

    def test_period(self):
        constraint = build_constraint("Shift(Cycle(DAY), Period.of(DAY, 3))")
        assert constraint == Shift(Cycle(Grain.DAY), Period.of(Grain.DAY, 3))
        assert isinstance(constraint, Constraint)

    @pytest.mark.parametrize("code", [
        "Intersect(",
        "Tomorrow()",
        "__import__('os')",
        "42",
        "DayOfMonth(40)",
        "Year()",
    ])
    def test_invalid_code(self, code):
        with pytest.raises(ValueError):
            build_constraint(code)
