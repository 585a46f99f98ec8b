from datetime import datetime

RECENT_GROUP: str = "01recent"
YEAR_GROUP: str = "02year"
OLDER_GROUP: str = "03older"

DATE_ONLY: str = "%Y-%m-%d"


def age_in_days(mtime: datetime, now: datetime) -> int:
    # Truncates toward zero, so a timestamp in the future counts as age 0.
    hours: float = (now - mtime).total_seconds() / 3600.0
    return int(hours / 24.0)


def classify(mtime: datetime, now: datetime, *, recent_days: int = 30, year_days: int = 365) -> tuple[str, str]:
    """
    Map a modification time to a (group, label) pair.

    Group ids sort lexicographically from newest tier to oldest. The label
    is the modification date, truncated to month or year precision for the
    older tiers.

    Parameters
    ----------
    mtime : datetime
        Modification time of the file.
    now : datetime
        Reference time the age is measured against.

    Returns
    -------
    tuple[str, str]
        The coarse group id and the display label.
    """
    label: str = mtime.strftime(DATE_ONLY)
    age: int = age_in_days(mtime, now)

    if age < recent_days:
        return RECENT_GROUP, label
    if age < year_days:
        return YEAR_GROUP, label[0:7]
    return OLDER_GROUP, label[0:4]
