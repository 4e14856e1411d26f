"""
排课相关的基础类型与日期工具
"""

import calendar
from datetime import date, datetime
from typing import Any, Iterable, List, Optional


# 星期编号：0=周日 ... 6=周六
WEEKDAY_LABELS = ["Dim", "Lun", "Mar", "Mer", "Jeu", "Ven", "Sam"]

FRENCH_MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre"
]

NON_REPETITIVE_LABEL = "Non répétitif"

# 后端时间戳对象可能暴露的取值方法
_TIMESTAMP_ACCESSORS = ("to_date", "toDate", "to_datetime", "ToDatetime")


def normalize_calendar_date(value: Any) -> Optional[date]:
    """
    统一转换为日历日期
    支持ISO字符串、带 toDate() 类方法的时间戳对象、datetime 以及 date
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise ValueError(f"无法解析的日期: {value!r}")

    for accessor in _TIMESTAMP_ACCESSORS:
        method = getattr(value, accessor, None)
        if callable(method):
            return normalize_calendar_date(method())

    raise ValueError(f"不支持的日期类型: {type(value).__name__}")


def add_months(start: date, months: int) -> date:
    """按月偏移，目标月份天数不足时取月末"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def sunday_based_weekday(day: date) -> int:
    """Python的weekday()以周一为0，这里转换为周日为0"""
    return (day.weekday() + 1) % 7


def format_french_date(day: date) -> str:
    """例如 1 janvier 2024"""
    return f"{day.day} {FRENCH_MONTHS[day.month - 1]} {day.year}"


def weekday_labels(week_days: Iterable[int]) -> List[str]:
    return [WEEKDAY_LABELS[d] for d in week_days]


def format_schedule(
    week_days: Iterable[int],
    start_time: str,
    end_time: str,
    is_repetitive: bool = True
) -> str:
    """
    生成课程展示用的排课字符串
    例如 "Lun, Mer • 14:00 - 16:00"
    """
    days = list(week_days or [])
    if is_repetitive and days:
        days_text = ", ".join(weekday_labels(days))
    else:
        days_text = NON_REPETITIVE_LABEL
    return f"{days_text} • {start_time} - {end_time}"


def time_to_minutes(value: str) -> int:
    """HH:MM 转换为当天分钟数"""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)
