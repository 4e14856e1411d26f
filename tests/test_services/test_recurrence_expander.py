"""
排课展开测试
"""

import pytest
from datetime import date, timedelta

from educonnect.core.exceptions import InvalidScheduleFormat, InvalidWeekday, NoWeekdaysSelected
from educonnect.models.course import Course
from educonnect.models.schedule import sunday_based_weekday
from educonnect.services.recurrence_expander import (
    Occurrences,
    RecurrenceExpander,
    expand_occurrences,
    parse_schedule,
    repetition_id,
    resolve_bounds
)


class TestParseSchedule:

    def test_colon_separator(self):
        assert parse_schedule("14:00 - 16:00") == ("14:00", "16:00")

    def test_h_separator_is_zero_padded(self):
        assert parse_schedule("9h30-11h00") == ("09:30", "11:00")

    def test_embedded_in_display_string(self):
        assert parse_schedule("Lun, Mer • 8:15 - 10:45") == ("08:15", "10:45")

    @pytest.mark.parametrize("schedule", [
        "not a schedule", "", None, "14 - 16", "14:0 - 16:00",
        "14:00:00 - 16:00:00", "14:00 - 16:00:00", "114:00 - 16:00"
    ])
    def test_invalid_format(self, schedule):
        with pytest.raises(InvalidScheduleFormat):
            parse_schedule(schedule)


class TestExpandOccurrences:

    def test_every_matching_day_in_ascending_order(self):
        start, end = date(2024, 1, 1), date(2024, 3, 31)
        week_days = [0, 2, 5]

        dates = list(expand_occurrences(start, end, week_days))

        expected = [
            (start + timedelta(days=i)).isoformat()
            for i in range((end - start).days + 1)
            if sunday_based_weekday(start + timedelta(days=i)) in week_days
        ]
        assert dates == expected
        assert dates == sorted(set(dates))

    def test_start_after_end_is_empty(self):
        assert list(expand_occurrences(date(2024, 2, 1), date(2024, 1, 1), [1, 3])) == []

    def test_single_day_range(self):
        assert list(expand_occurrences("2024-01-01", "2024-01-01", [1])) == ["2024-01-01"]
        assert list(expand_occurrences("2024-01-01", "2024-01-01", [2])) == []

    def test_restartable_and_deterministic(self):
        occurrences = expand_occurrences("2024-01-01", "2024-01-31", [1, 3])
        assert isinstance(occurrences, Occurrences)
        assert list(occurrences) == list(occurrences)
        assert list(occurrences) == list(expand_occurrences("2024-01-01", "2024-01-31", [1, 3]))

    def test_duplicate_weekdays_do_not_duplicate_dates(self):
        assert list(expand_occurrences("2024-01-01", "2024-01-07", [1, 1])) == ["2024-01-01"]

    def test_empty_weekdays(self):
        with pytest.raises(NoWeekdaysSelected):
            expand_occurrences("2024-01-01", "2024-01-31", [])

    @pytest.mark.parametrize("weekday", [7, -1, "1", True])
    def test_invalid_weekday(self, weekday):
        with pytest.raises(InvalidWeekday):
            expand_occurrences("2024-01-01", "2024-01-31", [1, weekday])

    def test_missing_bounds_are_not_defaulted(self):
        with pytest.raises(ValueError):
            expand_occurrences(None, "2024-01-31", [1])


class TestResolveBounds:

    def test_defaults(self):
        assert resolve_bounds(None, None, date(2024, 1, 15)) == (date(2024, 1, 15), date(2024, 4, 15))

    def test_explicit_bounds_win(self):
        assert resolve_bounds("2024-02-01", "2024-02-29", date(2024, 1, 15)) == (
            date(2024, 2, 1), date(2024, 2, 29)
        )


class TestBuildSessionRecords:

    @pytest.fixture
    def course(self):
        return Course(
            course_id="course_001",
            title="Algèbre linéaire",
            description="Vecteurs et matrices",
            instructor_id="teacher_001",
            instructor_name="Marie Curie",
            course_type="time-based",
            is_repetitive=True,
            schedule="Lun, Mer • 14:00 - 16:00",
            start_date="2024-01-01",
            end_date="2024-01-14",
            week_days=[1, 3],
            is_online=False,
            location="Salle 101"
        )

    @pytest.fixture
    def expander(self):
        return RecurrenceExpander(clock=lambda: date(2024, 1, 1))

    def test_monday_wednesday_two_weeks(self, expander, course):
        sessions = expander.build_session_records(course, "student_001", "teacher_001")

        assert [s.date for s in sessions] == ["2024-01-01", "2024-01-03", "2024-01-08", "2024-01-10"]
        for session in sessions:
            assert set(session.participants) == {"student_001", "teacher_001"}
            assert session.repetition_id == "course_course_001_student_student_001"
            assert session.start_time == "14:00"
            assert session.end_time == "16:00"
            assert session.attendees == 2
            assert session.course_id == "course_001"
            assert session.is_course_session
            assert session.repetition_frequency == "weekly"
            assert session.location == "Salle 101"
            assert session.meeting_link is None
            assert session.created_by == "student_001"
        assert sessions[0].formatted_date == "1 janvier 2024"

    def test_output_is_identical_across_calls(self, expander, course):
        first = expander.build_session_records(course, "student_001", "teacher_001")
        second = expander.build_session_records(course, "student_001", "teacher_001")
        assert [s.model_dump() for s in first] == [s.model_dump() for s in second]

    def test_structured_times_take_precedence(self, expander, course):
        course = course.model_copy(update={"start_time": "9:00", "end_time": "10:30", "schedule": "garbage"})
        sessions = expander.build_session_records(course, "student_001", "teacher_001")
        assert (sessions[0].start_time, sessions[0].end_time) == ("09:00", "10:30")

    def test_invalid_schedule_raises(self, expander, course):
        course = course.model_copy(update={"schedule": "le lundi après-midi"})
        with pytest.raises(InvalidScheduleFormat):
            expander.build_session_records(course, "student_001", "teacher_001")

    def test_online_course_copies_link(self, expander, course):
        course = course.model_copy(update={"is_online": True, "online_link": "https://meet.example.com/abc"})
        session = expander.build_session_records(course, "student_001", "teacher_001")[0]
        assert session.location == "En ligne"
        assert session.meeting_link == "https://meet.example.com/abc"
        assert session.is_online

    def test_default_bounds_use_clock(self, course):
        course = course.model_copy(update={"start_date": None, "end_date": None})
        expander = RecurrenceExpander(clock=lambda: date(2024, 1, 1), default_months=3)

        sessions = expander.build_session_records(course, "student_001", "teacher_001")

        assert sessions[0].date == "2024-01-01"
        assert sessions[-1].date <= "2024-04-01"
        assert sessions[-1].date >= "2024-03-25"

    def test_not_repetitive_is_programming_error(self, expander, course):
        course = course.model_copy(update={"is_repetitive": False})
        with pytest.raises(ValueError):
            expander.build_session_records(course, "student_001", "teacher_001")

    def test_repetition_id(self):
        assert repetition_id("c1", "s1") == "course_c1_student_s1"
