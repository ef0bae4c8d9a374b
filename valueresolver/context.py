"""
Resolution of abstract semantic values into concrete outputs.

A :class:`ResolverContext` is built once per request around a reference
"now" and is read-only afterwards; it can be shared between threads.
:meth:`ResolverContext.resolve` is a pure function of the context and the
value. It returns ``None`` when the value's kind is unknown or when a
temporal value has no candidate interval.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional
import logging

from .conf import apply_settings
from .dimension import (
    AmountOfMoneyValue, DatetimeKind, DatetimeValue, Direction, DurationValue,
    End, FloatValue, IntegerValue, OrdinalValue, PercentageValue, Start,
    TemperatureValue,
)
from .moment import Context, Grain, Interval, Moment, moment_from_secs
from .output import (
    After, AmountOfMoneyOutput, Before, Between, DatetimeIntervalOutput,
    DatetimeOutput, DurationOutput, FloatOutput, IntegerOutput, OrdinalOutput,
    Output, PercentageOutput, TemperatureOutput,
)
from .utils import get_timezone_from_tz_string

logger = logging.getLogger(__name__)


class InvalidContextError(ValueError):
    pass


class ParsingContext(ABC):
    @abstractmethod
    def resolve(self, value):
        pass


class IdentityContext(ParsingContext):
    """A context that leaves values unresolved."""

    def resolve(self, value):
        return value


@dataclass(frozen=True)
class ResolverContext(ParsingContext):
    ctx: Context

    @classmethod
    @apply_settings
    def from_secs(cls, secs: int, tz=None, settings=None) -> ResolverContext:
        """Context anchored on the second starting ``secs`` after the Unix epoch.

        ``tz`` is a tzinfo or a timezone string; it defaults to the
        ``TIMEZONE`` setting. Dates between 1970 and 2038 are supported on
        every platform, wider ranges depend on the platform's time functions.

        :raises: ``InvalidContextError`` if the timestamp cannot be represented.
        """
        if tz is None or isinstance(tz, str):
            tz = get_timezone_from_tz_string(tz or settings.TIMEZONE)
        try:
            moment = moment_from_secs(secs, tz)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidContextError(f"Timestamp {secs} cannot be represented: {e}")
        anchor = Interval.starting_at(moment, Grain.SECOND)
        return cls.for_reference(anchor, settings=settings)

    @classmethod
    @apply_settings
    def for_reference(cls, now: Interval, settings=None) -> ResolverContext:
        """Context for the given reference; the admissible window is derived from it."""
        return cls(
            ctx=Context.for_reference(
                now, years_before=settings.YEARS_BEFORE, years_after=settings.YEARS_AFTER
            )
        )

    @classmethod
    @apply_settings
    def new(cls, now: Interval, min: Interval, max: Interval, settings=None) -> ResolverContext:
        """Context with an explicit admissible window.

        :raises: ``InvalidContextError`` if ``now`` lies outside ``[min, max]``
            and the ``STRICT_CONTEXT`` setting is on.
        """
        ctx = Context(reference=now, min=min, max=max)
        if settings.STRICT_CONTEXT and not ctx.is_consistent():
            raise InvalidContextError(
                f"Reference {now!r} is outside the window [{min!r}, {max!r}]"
            )
        return cls(ctx=ctx)

    @property
    def reference(self) -> Interval:
        return self.ctx.reference

    def resolve(self, value) -> Optional[Output]:
        if isinstance(value, DatetimeValue):
            return self._resolve_datetime(value)
        elif isinstance(value, IntegerValue):
            return IntegerOutput(value.value)
        elif isinstance(value, FloatValue):
            return FloatOutput(value.value)
        elif isinstance(value, OrdinalValue):
            return OrdinalOutput(value.value)
        elif isinstance(value, AmountOfMoneyValue):
            return AmountOfMoneyOutput(value=value.value, precision=value.precision, unit=value.unit)
        elif isinstance(value, TemperatureValue):
            return TemperatureOutput(value=value.value, unit=value.unit, latent=value.latent)
        elif isinstance(value, DurationValue):
            return DurationOutput(period=value.period, precision=value.precision)
        elif isinstance(value, PercentageValue):
            return PercentageOutput(value.value)
        return None

    def resolve_all(self, values: Iterable) -> List[Optional[Output]]:
        return [self.resolve(value) for value in values]

    def _select(self, value: DatetimeValue) -> Optional[Interval]:
        walker = value.constraint.to_walker(self.ctx.reference, self.ctx)
        candidate = next(walker.forward, None)
        if (
            candidate is not None
            and value.form.not_immediate
            and candidate.intersect(self.ctx.reference) is not None
        ):
            candidate = next(walker.forward, None)
        if candidate is None:
            candidate = next(walker.backward, None)
        return candidate

    def _resolve_datetime(self, value: DatetimeValue) -> Optional[Output]:
        interval = self._select(value)
        if interval is None:
            return None

        if value.direction is not None:
            bound = value.direction.bound
            if isinstance(bound, Start):
                anchor = interval.start
            elif isinstance(bound, End) and bound.only_interval:
                anchor = interval.end if interval.end is not None else interval.start
            else:
                anchor = interval.end_moment()
            payload = self._datetime_output(value, anchor, interval.grain)
            if value.direction.direction == Direction.AFTER:
                kind = After(payload)
            else:
                kind = Before(payload)
            return DatetimeIntervalOutput(interval_kind=kind, datetime_kind=payload.datetime_kind)

        if interval.end is not None:
            if value.datetime_kind in (DatetimeKind.DATE, DatetimeKind.TIME):
                logger.warning(f"{value.datetime_kind.name} kind with an interval - {interval!r}")
            return DatetimeIntervalOutput(
                interval_kind=Between(
                    start=interval.start,
                    end=interval.end,
                    precision=value.precision,
                    latent=value.latent,
                ),
                datetime_kind=value.datetime_kind,
            )

        return self._datetime_output(value, interval.start, interval.grain)

    @staticmethod
    def _datetime_output(value: DatetimeValue, moment: Moment, grain: Grain) -> DatetimeOutput:
        return DatetimeOutput(
            moment=moment,
            grain=grain,
            precision=value.precision,
            latent=value.latent,
            datetime_kind=value.datetime_kind,
        )


def resolve(context: ParsingContext, value):
    """Resolve ``value`` against ``context``; ``None`` when it cannot be resolved."""
    return context.resolve(value)
