"""Access to the ``[custom]`` section of the domain configuration."""

from protean.utils.globals import current_domain

DEFAULT_LEAVE_DAY_CAP = 8
DEFAULT_SWEEP_PAGE_SIZE = 100
DEFAULT_SWEEP_TIME_UTC = "00:05"


def custom_setting(key, default=None):
    custom = current_domain.config.get("custom") or {}
    return custom.get(key, default)


def leave_day_cap() -> int:
    return int(custom_setting("leave_day_cap", DEFAULT_LEAVE_DAY_CAP))


def sweep_page_size() -> int:
    return int(custom_setting("sweep_page_size", DEFAULT_SWEEP_PAGE_SIZE))


def sweep_time_utc() -> str:
    return str(custom_setting("sweep_time_utc", DEFAULT_SWEEP_TIME_UTC))
