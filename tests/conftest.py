"""Shared fixtures: a UTC epoch context and a scripted constraint that records pulls."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

import pytest

from valueresolver.constraint import Constraint, Walker
from valueresolver.context import ResolverContext
from valueresolver.moment import Grain, Interval

UTC = timezone.utc


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def day(year, month, dom):
    return Interval(start=utc(year, month, dom), grain=Grain.DAY)


class RecordingIterator:
    """Iterator that counts every pull, including the one that finds it exhausted."""

    def __init__(self, items):
        self._items = iter(items)
        self.pulls = 0

    def __iter__(self):
        return self

    def __next__(self):
        self.pulls += 1
        return next(self._items)


@dataclass
class ScriptedConstraint(Constraint):
    """Constraint replaying fixed candidate lists; every walker it hands out is kept."""
    forward: List[Interval] = field(default_factory=list)
    backward: List[Interval] = field(default_factory=list)
    walkers: List[Walker] = field(default_factory=list, compare=False, repr=False)

    @property
    def grain(self):
        return Grain.DAY

    def to_walker(self, reference, context):
        walker = Walker(
            forward=RecordingIterator(self.forward),
            backward=RecordingIterator(self.backward),
        )
        self.walkers.append(walker)
        return walker


@pytest.fixture
def context():
    """Context anchored on 1970-01-01T00:00:00Z (a Thursday), second grain."""
    return ResolverContext.from_secs(0, tz="UTC")
