"""
课程排课展开服务
把按周重复的定时课程展开为具体的上课日期，并为报名学生构建日程记录。
本模块不做任何持久化，写入由报名协调服务负责。
"""

import logging
import re
from datetime import date, timedelta
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

from educonnect.core.config import settings
from educonnect.core.exceptions import InvalidScheduleFormat, NoWeekdaysSelected, InvalidWeekday
from educonnect.models.course import Course
from educonnect.models.session import CourseSession
from educonnect.models.schedule import (
    add_months,
    format_french_date,
    normalize_calendar_date,
    sunday_based_weekday
)

logger = logging.getLogger(__name__)

# 例如 "14:00 - 16:00"、"9h30-11h00"，允许出现在 "Lun, Mer • 14:00 - 16:00" 这类展示字符串中
SCHEDULE_PATTERN = re.compile(r"(?<![\d:h])(\d{1,2})[h:](\d{2})\s*-\s*(\d{1,2})[h:](\d{2})(?![\d:])")

ONLINE_LOCATION_LABEL = "En ligne"
COURSE_SESSION_CATEGORY = "Cours 📚"


def parse_schedule(schedule: Optional[str]) -> Tuple[str, str]:
    """从排课字符串中解析开始和结束时间，返回补零的 HH:MM"""
    match = SCHEDULE_PATTERN.search(schedule or "")
    if not match:
        raise InvalidScheduleFormat(schedule or "")

    start_hour, start_minute, end_hour, end_minute = match.groups()
    return f"{int(start_hour):02d}:{start_minute}", f"{int(end_hour):02d}:{end_minute}"


def validate_week_days(week_days: Optional[Iterable[Any]]) -> List[int]:
    """校验星期集合：非空且每个值在 0-6 之间（0=周日）"""
    days = list(week_days or [])
    if not days:
        raise NoWeekdaysSelected()

    for day in days:
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise InvalidWeekday(day)
    return days


class Occurrences:
    """
    上课日期序列
    惰性计算、有限、可重复迭代：每次迭代都从开课日期重新开始，
    按日期升序产出ISO日期字符串
    """

    def __init__(self, start_date: date, end_date: date, week_days: Iterable[int]):
        self.start_date = start_date
        self.end_date = end_date
        self.week_days = frozenset(week_days)

    def __iter__(self) -> Iterator[str]:
        day = self.start_date
        while day <= self.end_date:
            if sunday_based_weekday(day) in self.week_days:
                yield day.isoformat()
            day += timedelta(days=1)

    def __repr__(self) -> str:
        return f"Occurrences({self.start_date}, {self.end_date}, {sorted(self.week_days)})"


def expand_occurrences(start_date: Any, end_date: Any, week_days: Iterable[Any]) -> Occurrences:
    """
    展开区间 [start_date, end_date] 内所有落在 week_days 上的日期

    日期边界接受ISO字符串、带 toDate() 的时间戳对象或 date，
    开课日期晚于结课日期时返回空序列。默认边界由调用方通过 resolve_bounds 提供。
    """
    days = validate_week_days(week_days)

    start = normalize_calendar_date(start_date)
    end = normalize_calendar_date(end_date)
    if start is None or end is None:
        raise ValueError("展开排课需要明确的开课和结课日期")

    return Occurrences(start, end, days)


def resolve_bounds(
    start_date: Any,
    end_date: Any,
    today: date,
    months: int = 3
) -> Tuple[date, date]:
    """缺省开课日期为今天，缺省结课日期为今天起 months 个月后"""
    start = normalize_calendar_date(start_date) or today
    end = normalize_calendar_date(end_date) or add_months(today, months)
    return start, end


def repetition_id(course_id: str, student_id: str) -> str:
    """同一课程-学生对的日程分组ID"""
    return f"course_{course_id}_student_{student_id}"


class RecurrenceExpander:
    """课程日程构建器"""

    def __init__(
        self,
        clock: Callable[[], date] = date.today,
        default_months: int = settings.default_schedule_months,
        max_attendees: int = settings.course_session_max_attendees
    ):
        self.clock = clock
        self.default_months = default_months
        self.max_attendees = max_attendees

    def session_times(self, course: Course) -> Tuple[str, str]:
        """优先使用结构化时间，否则解析排课字符串"""
        if course.start_time and course.end_time:
            return parse_schedule(f"{course.start_time} - {course.end_time}")
        return parse_schedule(course.schedule)

    def occurrence_dates(self, course: Course) -> Occurrences:
        start, end = resolve_bounds(
            course.start_date,
            course.end_date,
            today=self.clock(),
            months=self.default_months
        )
        return expand_occurrences(start, end, course.week_days)

    def build_session_records(
        self,
        course: Course,
        student_id: str,
        instructor_id: str
    ) -> List[CourseSession]:
        """为一个学生构建该课程全部上课日程记录"""
        if not course.requires_sessions:
            raise ValueError(f"课程 {course.course_id} 不是按周重复的定时课程，不应生成日程")

        # 排课格式错误必须在展开前暴露，不能静默生成0条日程
        start_time, end_time = self.session_times(course)
        dates = self.occurrence_dates(course)

        group_id = repetition_id(course.course_id, student_id)
        participants = list(dict.fromkeys([student_id, instructor_id]))
        location = ONLINE_LOCATION_LABEL if course.is_online else (course.location or "")
        meeting_link = course.online_link if course.is_online else None

        sessions = [
            CourseSession(
                title=course.title,
                description=course.description,
                organizer=course.instructor_name,
                organizer_id=instructor_id,
                teacher_name=course.instructor_name,
                date=day,
                formatted_date=format_french_date(date.fromisoformat(day)),
                start_time=start_time,
                end_time=end_time,
                time=f"{start_time} - {end_time}",
                location=location,
                meeting_link=meeting_link,
                is_online=course.is_online,
                attendees=2,
                max_attendees=self.max_attendees,
                category=COURSE_SESSION_CATEGORY,
                session_category="course",
                created_by=student_id,
                participants=participants,
                is_repetitive=True,
                repetition_id=group_id,
                repetition_frequency="weekly",
                course_id=course.course_id,
                is_course_session=True
            )
            for day in dates
        ]

        logger.debug(f"课程 {course.course_id} 为学生 {student_id} 生成 {len(sessions)} 条日程")
        return sessions
