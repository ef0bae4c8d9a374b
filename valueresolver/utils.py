from datetime import timedelta, timezone

import regex as re
from dateutil import tz as dateutil_tz
from tzlocal import get_localzone

RE_UTC_OFFSET = re.compile(
    r"^(?:UTC|GMT)?\s*(?P<sign>[+-])(?P<hours>\d{1,2}):?(?P<minutes>\d{2})?$",
    flags=re.I,
)


def get_local_timezone():
    return get_localzone()


def get_timezone_from_tz_string(tz_string):
    """Return a tzinfo for a timezone name, a UTC offset or ``"local"``.

    :raises: ``ValueError`` when the string cannot be mapped to a timezone.
    """
    if tz_string is None or "local" in tz_string.lower():
        return get_local_timezone()

    tz_string = tz_string.strip()
    if tz_string.upper() in ("UTC", "GMT", "Z"):
        return timezone.utc

    match = RE_UTC_OFFSET.match(tz_string)
    if match:
        offset = timedelta(
            hours=int(match.group("hours")), minutes=int(match.group("minutes") or 0)
        )
        if match.group("sign") == "-":
            offset = -offset
        return timezone(offset)

    tzinfo = dateutil_tz.gettz(tz_string)
    if tzinfo is None:
        raise ValueError(f"Unknown timezone: {tz_string!r}")
    return tzinfo
