import argparse
import json
import logging
import time

from valueresolver.constraint import build_constraint
from valueresolver.context import InvalidContextError, ResolverContext
from valueresolver.dimension import (
    BoundedDirection,
    DatetimeKind,
    DatetimeValue,
    Direction,
    End,
    Form,
    Precision,
    Start,
)


def build_value(args):
    constraint = build_constraint(args.constraint)
    direction = None
    if args.direction:
        bound = Start() if args.bound == "start" else End(only_interval=args.only_interval)
        direction = BoundedDirection(bound=bound, direction=Direction[args.direction.upper()])
    return DatetimeValue(
        constraint=constraint,
        form=Form(not_immediate=args.not_immediate),
        direction=direction,
        precision=Precision.APPROXIMATE if args.approximate else Precision.EXACT,
        latent=args.latent,
        datetime_kind=DatetimeKind[args.kind.upper()],
    )


def entrance(argv=None):
    valueresolver_argparse = argparse.ArgumentParser(
        description="Resolve a temporal constraint against a reference time."
    )
    valueresolver_argparse.add_argument(
        "constraint",
        help='Constraint code, e.g. "Intersect(DayOfWeek(MONDAY), TimeOfDay(MORNING))"',
    )
    valueresolver_argparse.add_argument(
        "--secs",
        type=int,
        default=None,
        help="Reference time as seconds since the Unix epoch (default: now)",
    )
    valueresolver_argparse.add_argument("--tz", help='Timezone of the reference, e.g. "UTC" or "Europe/Paris"')
    valueresolver_argparse.add_argument(
        "--not-immediate",
        action="store_true",
        help="Skip a first candidate that overlaps the reference",
    )
    valueresolver_argparse.add_argument("--direction", choices=["before", "after"])
    valueresolver_argparse.add_argument("--bound", choices=["start", "end"], default="start")
    valueresolver_argparse.add_argument("--only-interval", action="store_true")
    valueresolver_argparse.add_argument(
        "--kind",
        choices=[kind.name.lower() for kind in DatetimeKind],
        default="datetime",
    )
    valueresolver_argparse.add_argument("--approximate", action="store_true")
    valueresolver_argparse.add_argument("--latent", action="store_true")
    valueresolver_argparse.add_argument("-v", "--verbose", action="store_true")

    args = valueresolver_argparse.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        value = build_value(args)
    except ValueError as e:
        valueresolver_argparse.error(str(e))

    secs = args.secs if args.secs is not None else int(time.time())
    try:
        context = ResolverContext.from_secs(secs, tz=args.tz)
    except (InvalidContextError, ValueError) as e:
        valueresolver_argparse.error(str(e))

    output = context.resolve(value)
    if output is None:
        logging.info("valueresolver: no candidate found")
        return 1

    print(json.dumps(output.to_dict(), indent=2))
    return 0
