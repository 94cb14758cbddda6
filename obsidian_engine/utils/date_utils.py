"""Date manipulation utilities"""

from datetime import date

from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months"""
    return from_date + relativedelta(months=months)


def to_month_year(value: date) -> str:
    """Format as month and year, e.g. "January 2027" """
    return value.strftime("%B %Y")


def to_date_string(value: date) -> str:
    return value.isoformat()
