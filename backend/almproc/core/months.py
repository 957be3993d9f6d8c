"""Month arithmetic on calendar dates."""

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta


def first_of_month(d: date) -> date:
    """Truncate *d* to the first day of its month."""
    return date(d.year, d.month, 1)


def add_months(d: date, months: int) -> date:
    """
    Add *months* calendar months to *d*.

    Day-of-month is clamped to the target month's last day (31 Jan + 1M = 28/29 Feb),
    so repeated single steps may drift to earlier days than one multi-month step.
    """
    return d + relativedelta(months=int(months))
