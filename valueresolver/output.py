"""
Concrete resolved values handed back to the caller.

Every output is an immutable value; ``to_dict()`` renders it with ISO-8601
moments and lowercase names so it can be dumped as JSON.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

from .dimension import DatetimeKind, Precision
from .moment import Grain, Moment, Period


def _name(member) -> str:
    return member.value.lower()


def _period_dict(period: Period) -> dict:
    return {_name(grain): value for grain, value in period.components}


@dataclass(frozen=True)
class DatetimeOutput:
    moment: Moment
    grain: Grain
    precision: Precision
    latent: bool
    datetime_kind: DatetimeKind

    def to_dict(self) -> dict:
        return {
            "kind": "datetime",
            "moment": self.moment.isoformat(),
            "grain": _name(self.grain),
            "precision": _name(self.precision),
            "latent": self.latent,
            "datetime_kind": _name(self.datetime_kind),
        }


@dataclass(frozen=True)
class Between:
    start: Moment
    end: Moment
    precision: Precision
    latent: bool

    def to_dict(self) -> dict:
        return {
            "type": "between",
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "precision": _name(self.precision),
            "latent": self.latent,
        }


@dataclass(frozen=True)
class Before:
    value: DatetimeOutput

    def to_dict(self) -> dict:
        return {"type": "before", "value": self.value.to_dict()}


@dataclass(frozen=True)
class After:
    value: DatetimeOutput

    def to_dict(self) -> dict:
        return {"type": "after", "value": self.value.to_dict()}


DatetimeIntervalKind = Union[Between, Before, After]


@dataclass(frozen=True)
class DatetimeIntervalOutput:
    interval_kind: DatetimeIntervalKind
    datetime_kind: DatetimeKind

    def to_dict(self) -> dict:
        return {
            "kind": "datetime_interval",
            "interval": self.interval_kind.to_dict(),
            "datetime_kind": _name(self.datetime_kind),
        }


@dataclass(frozen=True)
class IntegerOutput:
    value: int

    def to_dict(self) -> dict:
        return {"kind": "integer", "value": self.value}


@dataclass(frozen=True)
class FloatOutput:
    value: float

    def to_dict(self) -> dict:
        return {"kind": "float", "value": self.value}


@dataclass(frozen=True)
class OrdinalOutput:
    value: int

    def to_dict(self) -> dict:
        return {"kind": "ordinal", "value": self.value}


@dataclass(frozen=True)
class AmountOfMoneyOutput:
    value: float
    precision: Precision
    unit: Optional[str]

    def to_dict(self) -> dict:
        return {
            "kind": "amount_of_money",
            "value": self.value,
            "precision": _name(self.precision),
            "unit": self.unit,
        }


@dataclass(frozen=True)
class TemperatureOutput:
    value: float
    unit: Optional[str]
    latent: bool

    def to_dict(self) -> dict:
        return {"kind": "temperature", "value": self.value, "unit": self.unit, "latent": self.latent}


@dataclass(frozen=True)
class DurationOutput:
    period: Period
    precision: Precision

    def to_dict(self) -> dict:
        return {
            "kind": "duration",
            "period": _period_dict(self.period),
            "precision": _name(self.precision),
        }


@dataclass(frozen=True)
class PercentageOutput:
    value: float

    def to_dict(self) -> dict:
        return {"kind": "percentage", "value": self.value}


Output = Union[
    DatetimeOutput,
    DatetimeIntervalOutput,
    IntegerOutput,
    FloatOutput,
    OrdinalOutput,
    AmountOfMoneyOutput,
    TemperatureOutput,
    DurationOutput,
    PercentageOutput,
]
