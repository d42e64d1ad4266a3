"""Smart Gestion — Display formatting for insight text."""

from typing import List

# Indexed by store weekday number: 0 = Sunday … 6 = Saturday
WEEKDAY_LABELS: List[str] = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# Heatmap rows run Monday-first
HEATMAP_DAY_LABELS: List[str] = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def weekday_label(day_of_week: int) -> str:
    if 0 <= day_of_week < len(WEEKDAY_LABELS):
        return WEEKDAY_LABELS[day_of_week]
    return "Day"


def format_number(value: float, max_decimals: int = 3) -> str:
    """Space-grouped thousands, comma decimals, trailing zeros dropped.

    >>> format_number(1200)
    '1 200'
    >>> format_number(1234.5)
    '1 234,5'
    """
    text = f"{round(value, max_decimals):,.{max_decimals}f}"
    integer, _, fraction = text.partition(".")
    integer = integer.replace(",", " ")
    fraction = fraction.rstrip("0")
    return f"{integer},{fraction}" if fraction else integer


def format_amount(value: float, currency: str, max_decimals: int = 3) -> str:
    return f"{format_number(value, max_decimals)} {currency}"
