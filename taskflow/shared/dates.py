"""Calendar helpers shared by task views, clients and analytics"""

from datetime import date, timedelta


def month_start(day: date) -> date:
    return day.replace(day=1)


def next_month_start(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def month_bounds(day: date) -> tuple[date, date]:
    """First day of the month of `day` and first day of the following month"""
    return month_start(day), next_month_start(day)


def week_end(day: date) -> date:
    """Sunday of the ISO week containing `day`"""
    return day + timedelta(days=6 - day.weekday())


def month_day_label(day: date) -> str:
    """e.g. "March 5" """
    return f"{day.strftime('%B')} {day.day}"
