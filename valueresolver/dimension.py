"""
Abstract semantic values produced by the grammar, before resolution.

The set of kinds is closed: :data:`Dimension` lists every kind the resolver
understands. Anything else is tolerated and resolves to nothing.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .constraint import Constraint
from .moment import Period


class Precision(Enum):
    EXACT = "EXACT"
    APPROXIMATE = "APPROXIMATE"


class DatetimeKind(Enum):
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    DATE_PERIOD = "DATE_PERIOD"
    TIME_PERIOD = "TIME_PERIOD"
    DATETIME_PERIOD = "DATETIME_PERIOD"
    EMPTY = "EMPTY"


class Direction(Enum):
    BEFORE = "BEFORE"
    AFTER = "AFTER"


@dataclass(frozen=True)
class Start:
    """Anchor an open-ended range on the start of the resolved interval."""


@dataclass(frozen=True)
class End:
    """
    Anchor an open-ended range on the end of the resolved interval.

    With ``only_interval`` the explicit end is used when there is one and the
    start otherwise; without it the end of the interval's grain is used.
    """
    only_interval: bool = False


Bound = Union[Start, End]


@dataclass(frozen=True)
class BoundedDirection:
    bound: Bound
    direction: Direction


@dataclass(frozen=True)
class Form:
    # None: the grammar expressed no preference, treated as False
    not_immediate: Optional[bool] = None


@dataclass(frozen=True)
class DatetimeValue:
    constraint: Constraint
    form: Form = field(default_factory=Form)
    direction: Optional[BoundedDirection] = None
    precision: Precision = Precision.EXACT
    latent: bool = False
    datetime_kind: DatetimeKind = DatetimeKind.DATETIME


@dataclass(frozen=True)
class IntegerValue:
    value: int


@dataclass(frozen=True)
class FloatValue:
    value: float


Number = Union[IntegerValue, FloatValue]


@dataclass(frozen=True)
class OrdinalValue:
    value: int


@dataclass(frozen=True)
class AmountOfMoneyValue:
    value: float
    precision: Precision = Precision.EXACT
    unit: Optional[str] = None


@dataclass(frozen=True)
class TemperatureValue:
    value: float
    unit: Optional[str] = None
    latent: bool = False


@dataclass(frozen=True)
class DurationValue:
    period: Period
    precision: Precision = Precision.EXACT


@dataclass(frozen=True)
class PercentageValue:
    value: float


Dimension = Union[
    DatetimeValue,
    IntegerValue,
    FloatValue,
    OrdinalValue,
    AmountOfMoneyValue,
    TemperatureValue,
    DurationValue,
    PercentageValue,
]
