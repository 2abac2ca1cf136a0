"""
Timezone-safe datetime utilities.

All timestamps are stored in UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC datetime with timezone info attached.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)
