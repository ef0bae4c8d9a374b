__version__ = "0.1.0"

from .conf import Settings, SettingValidationError, apply_settings
from .context import (
    IdentityContext,
    InvalidContextError,
    ParsingContext,
    ResolverContext,
    resolve,
)

# Calendar primitives
from .moment import Context, Grain, Interval, Moment, Period, floor, moment_from_secs

# Constraints
from .constraint import (
    Constraint, Walker, RepeatingConstraint,
    Cycle, DayOfWeek, MonthOfYear, DayOfMonth, HourOfDay, TimeOfDay,
    Year, Fixed, Intersect, Shift, Span,
    DayOfWeekType, MonthOfYearType, TimeOfDayType,
    build_constraint,
)

# Abstract values
from .dimension import (
    Dimension, DatetimeValue, IntegerValue, FloatValue, Number, OrdinalValue,
    AmountOfMoneyValue, TemperatureValue, DurationValue, PercentageValue,
    Form, Start, End, Bound, BoundedDirection, Direction, Precision, DatetimeKind,
)

# Resolved values
from .output import (
    Output, DatetimeOutput, DatetimeIntervalOutput, DatetimeIntervalKind,
    Between, Before, After,
    IntegerOutput, FloatOutput, OrdinalOutput, AmountOfMoneyOutput,
    TemperatureOutput, DurationOutput, PercentageOutput,
)
