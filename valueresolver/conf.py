from functools import wraps


class SettingValidationError(ValueError):
    pass


DEFAULT_SETTINGS = {
    "TIMEZONE": "local",
    "YEARS_BEFORE": 100,
    "YEARS_AFTER": 100,
    "STRICT_CONTEXT": True,
}

_SETTING_TYPES = {
    "TIMEZONE": str,
    "YEARS_BEFORE": int,
    "YEARS_AFTER": int,
    "STRICT_CONTEXT": bool,
}


class Settings:
    """Resolver settings.

    * ``TIMEZONE``: timezone used when a context is built from epoch seconds
      without an explicit timezone. ``"local"`` uses the machine timezone.
    * ``YEARS_BEFORE`` / ``YEARS_AFTER``: size of the admissible window around
      the reference when ``min``/``max`` are derived from it.
    * ``STRICT_CONTEXT``: reject contexts whose reference is outside
      ``[min, max]``.
    """

    def __init__(self, settings=None):
        self._default = True
        for key, value in DEFAULT_SETTINGS.items():
            setattr(self, key, value)
        if settings:
            self._default = False
            for key, value in settings.items():
                setattr(self, key, value)

    def replace(self, **kwds):
        values = {key: getattr(self, key) for key in DEFAULT_SETTINGS}
        values.update(kwds)
        check_settings(values)
        return Settings(values)

    def __repr__(self):
        values = ", ".join(f"{key}={getattr(self, key)!r}" for key in DEFAULT_SETTINGS)
        return f"Settings({values})"


settings = Settings()


def check_settings(settings):
    for key, value in settings.items():
        if key not in DEFAULT_SETTINGS:
            raise SettingValidationError(f'"{key}" is not a valid setting')

        expected = _SETTING_TYPES[key]
        # bool is a subclass of int and must not pass as a year count
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise SettingValidationError(
                f'"{key}" must be "{expected.__name__}", not "{type(value).__name__}".'
            )

    for key in ("YEARS_BEFORE", "YEARS_AFTER"):
        if key in settings and settings[key] < 0:
            raise SettingValidationError(f'"{key}" cannot be negative')


def apply_settings(f):
    """Turn the ``settings`` keyword of ``f`` into a validated :class:`Settings`."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        mod_settings = kwargs.get("settings")

        if mod_settings is None:
            kwargs["settings"] = settings
        elif isinstance(mod_settings, dict):
            check_settings(mod_settings)
            kwargs["settings"] = Settings(mod_settings)
        elif not isinstance(mod_settings, Settings):
            raise TypeError("settings can only be either dict or instance of Settings class")

        return f(*args, **kwargs)

    return wrapper
