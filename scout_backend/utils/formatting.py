import math

SECONDS_PER_DAY = 24 * 60 * 60


def format_percentage(part, whole):
    """Format ``part / whole`` as a percentage string with two decimals."""
    if not whole:
        return "0%"
    return f"{(part / whole) * 100:.2f}%"


def round_average(value):
    """Round a mean to two decimals; a missing mean counts as 0."""
    if value is None:
        return 0
    return round(float(value), 2)


def days_between(start, end):
    """Whole days from ``start`` to ``end``, rounded up. None if either is missing."""
    if start is None or end is None:
        return None
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)
