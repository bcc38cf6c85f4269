"""Calendar attribute derivation for a single spine day.

Every function here is a pure function of its date arguments. Period end
dates are always "start of the next period minus one day" so month lengths
and leap years need no lookup table.
"""
from datetime import date, timedelta
from typing import Union

from models.time_spine import DateSpineRow, WeekStartConvention

ONE_DAY = timedelta(days=1)
YEAR_OVER_YEAR_OFFSET = timedelta(days=364)

# English names regardless of process locale (strftime %A/%B is locale-bound)
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

Convention = Union[WeekStartConvention, str]


def shift_years(day: date, years: int) -> date:
    """Shift by whole calendar years; Feb 29 falls back to Feb 28."""
    target_year = day.year + years
    try:
        return day.replace(year=target_year)
    except ValueError:
        return day.replace(year=target_year, day=28)


def day_of_week(day: date) -> int:
    """Day of week with Sunday=1 .. Saturday=7."""
    return day.isoweekday() % 7 + 1


def week_start(day: date, convention: Convention = WeekStartConvention.ISO_MONDAY) -> date:
    """First day of the week containing ``day``."""
    if WeekStartConvention(convention) == WeekStartConvention.SUNDAY:
        return day - timedelta(days=day.isoweekday() % 7)
    return day - timedelta(days=day.weekday())


def week_end(day: date, convention: Convention = WeekStartConvention.ISO_MONDAY) -> date:
    return week_start(day, convention) + timedelta(days=6)


def week_of_year(day: date, convention: Convention = WeekStartConvention.ISO_MONDAY) -> int:
    """Week number of ``day``.

    ISO numbering for ``iso_monday``. For ``sunday`` weeks start on Sunday and
    week 1 is the (possibly partial) week containing January 1.
    """
    if WeekStartConvention(convention) == WeekStartConvention.SUNDAY:
        jan_first = date(day.year, 1, 1)
        lead_days = jan_first.isoweekday() % 7
        return (day.timetuple().tm_yday - 1 + lead_days) // 7 + 1
    return day.isocalendar()[1]


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    if day.month == 12:
        next_start = date(day.year + 1, 1, 1)
    else:
        next_start = date(day.year, day.month + 1, 1)
    return next_start - ONE_DAY


def quarter_of_year(day: date) -> int:
    return (day.month - 1) // 3 + 1


def quarter_start(day: date) -> date:
    return date(day.year, 3 * (quarter_of_year(day) - 1) + 1, 1)


def quarter_end(day: date) -> date:
    start = quarter_start(day)
    if start.month == 10:
        next_start = date(start.year + 1, 1, 1)
    else:
        next_start = date(start.year, start.month + 3, 1)
    return next_start - ONE_DAY


def year_start(day: date) -> date:
    return date(day.year, 1, 1)


def year_end(day: date) -> date:
    return date(day.year + 1, 1, 1) - ONE_DAY


def derive_calendar_fields(date_day: date,
                           convention: Convention = WeekStartConvention.ISO_MONDAY) -> DateSpineRow:
    """Derive every spine column for one day.

    The ``iso_*`` columns always use ISO weeks. With the default ISO
    convention the ``week_*`` columns are identical to them.

    Args:
        date_day: The spine day
        convention: First-day-of-week convention for the ``week_*`` columns

    Returns:
        Fully populated DateSpineRow
    """
    iso = WeekStartConvention.ISO_MONDAY
    prior_year_day = shift_years(date_day, -1)
    yoy_day = date_day - YEAR_OVER_YEAR_OFFSET

    return DateSpineRow(
        date_day=date_day,
        prior_date_day=date_day - ONE_DAY,
        next_date_day=date_day + ONE_DAY,
        prior_year_date_day=prior_year_day,
        prior_year_over_year_date_day=yoy_day,
        day_of_week=day_of_week(date_day),
        day_of_week_iso=date_day.isoweekday(),
        day_of_week_name=DAY_NAMES[date_day.weekday()],
        day_of_week_name_short=DAY_NAMES[date_day.weekday()][:3],
        day_of_month=date_day.day,
        day_of_year=date_day.timetuple().tm_yday,

        week_start_date=week_start(date_day, convention),
        week_end_date=week_end(date_day, convention),
        prior_year_week_start_date=week_start(yoy_day, convention),
        prior_year_week_end_date=week_end(yoy_day, convention),
        week_of_year=week_of_year(date_day, convention),

        iso_week_start_date=week_start(date_day, iso),
        iso_week_end_date=week_end(date_day, iso),
        prior_year_iso_week_start_date=week_start(yoy_day, iso),
        prior_year_iso_week_end_date=week_end(yoy_day, iso),
        iso_week_of_year=week_of_year(date_day, iso),

        prior_year_week_of_year=week_of_year(yoy_day, convention),
        prior_year_iso_week_of_year=week_of_year(yoy_day, iso),

        month_of_year=date_day.month,
        month_name=MONTH_NAMES[date_day.month - 1],
        month_name_short=MONTH_NAMES[date_day.month - 1][:3],
        month_start_date=month_start(date_day),
        month_end_date=month_end(date_day),
        prior_year_month_start_date=month_start(prior_year_day),
        prior_year_month_end_date=month_end(prior_year_day),

        quarter_of_year=quarter_of_year(date_day),
        quarter_start_date=quarter_start(date_day),
        quarter_end_date=quarter_end(date_day),

        year_number=date_day.year,
        year_start_date=year_start(date_day),
        year_end_date=year_end(date_day),
    )
