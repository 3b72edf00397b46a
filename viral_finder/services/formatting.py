"""Human-readable formatting of counts, dates and rates for display"""

from datetime import datetime
from typing import Optional, Union


def format_count(value: Optional[Union[int, float]]) -> str:
    """
    Format a count the Japanese way.

    Values from ten thousand up are shown in units of 万 with two
    decimals; smaller ones get thousands separators.
    """
    if value is None:
        return "-"
    if value >= 10000:
        return f"{value / 10000:.2f}万"
    return f"{value:,}"


def format_date_japanese(value: Optional[str]) -> str:
    """Render an ISO timestamp as 年月日"""
    if not value:
        return "-"
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return "-"
    return f"{moment.year}年{moment.month}月{moment.day}日"


def format_spread_rate(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:.2f}倍"
