"""
CourseService业务逻辑测试
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

from educonnect.core.exceptions import (
    CourseNotFound,
    InvalidCourseData,
    InvalidCourseDuration,
    InvalidWeekday,
    NoWeekdaysSelected,
    NotCourseOwner
)
from educonnect.models.course import Course, CourseCreate, CourseType, CourseUpdate
from educonnect.repositories.course_repository import CourseRepository
from educonnect.services.course_service import CourseService

INSTRUCTOR_ID = "teacher_001"


def course_payload(**overrides):
    data = {
        "title": "Algèbre linéaire",
        "description": "Vecteurs, matrices et applications",
        "category": "mathematiques",
        "course_type": "time-based",
        "is_repetitive": True,
        "start_time": "14:00",
        "end_time": "16:00",
        "start_date": "2024-01-01",
        "end_date": "2024-03-31",
        "week_days": [3, 1],
        "is_online": False,
        "location": "Salle 101",
        "is_paid": False
    }
    data.update(overrides)
    return CourseCreate(**data)


@pytest.mark.asyncio
class TestCreateCourse:
    """创建课程"""

    async def test_create_repetitive_free_course(self, course_service, users):
        course = await course_service.create_course(INSTRUCTOR_ID, course_payload())

        assert course.instructor_name == "Marie Curie"
        assert course.instructor_profile_picture == "https://example.com/marie.png"
        assert course.schedule == "Lun, Mer • 14:00 - 16:00"
        assert course.week_days == [1, 3]
        assert course.start_date == date(2024, 1, 1)
        assert course.end_date == date(2024, 3, 31)
        assert course.base_price == course.final_price == Decimal("0")
        assert course.enrolled_students == []

    async def test_create_paid_course_computes_final_price(self, course_service, users):
        course = await course_service.create_course(INSTRUCTOR_ID, course_payload(is_paid=True, price="49.99"))

        assert course.base_price == Decimal("49.99")
        assert course.final_price == Decimal("51.24")
        assert course.platform_fee == Decimal("1.25")

    async def test_non_repetitive_course_drops_recurrence_fields(self, course_service, users):
        course = await course_service.create_course(
            INSTRUCTOR_ID, course_payload(is_repetitive=False, week_days=[])
        )

        assert course.schedule == "Non répétitif • 14:00 - 16:00"
        assert not course.is_repetitive
        assert course.week_days == []
        assert course.start_date is None
        assert not course.requires_sessions

    async def test_video_course_needs_no_schedule(self, course_service, users):
        course = await course_service.create_course(
            INSTRUCTOR_ID,
            course_payload(course_type="video-based", start_time=None, end_time=None, week_days=[], location=None)
        )
        assert course.course_type == CourseType.VIDEO_BASED
        assert course.schedule is None
        assert course.videos == []

    async def test_online_course_requires_link(self, course_service, users):
        with pytest.raises(InvalidCourseData):
            await course_service.create_course(INSTRUCTOR_ID, course_payload(is_online=True, online_link=""))

        course = await course_service.create_course(
            INSTRUCTOR_ID, course_payload(is_online=True, online_link="https://meet.example.com/x")
        )
        assert course.online_link == "https://meet.example.com/x"
        assert course.location is None

    @pytest.mark.parametrize("start_time, end_time", [("14:00", "14:00"), ("16:00", "14:00"), ("08:00", "13:01")])
    async def test_invalid_duration(self, course_service, course_repo, users, start_time, end_time):
        with pytest.raises(InvalidCourseDuration):
            await course_service.create_course(
                INSTRUCTOR_ID, course_payload(start_time=start_time, end_time=end_time)
            )
        assert await course_repo.query_by_field("instructor_id", INSTRUCTOR_ID) == []

    async def test_five_hours_is_allowed(self, course_service, users):
        course = await course_service.create_course(INSTRUCTOR_ID, course_payload(start_time="8:00", end_time="13:00"))
        assert (course.start_time, course.end_time) == ("08:00", "13:00")

    async def test_repetitive_course_requires_weekdays(self, course_service, users):
        with pytest.raises(NoWeekdaysSelected):
            await course_service.create_course(INSTRUCTOR_ID, course_payload(week_days=[]))
        with pytest.raises(InvalidWeekday):
            await course_service.create_course(INSTRUCTOR_ID, course_payload(week_days=[1, 9]))

    @pytest.mark.parametrize("overrides", [
        {"title": "  "},
        {"description": ""},
        {"start_time": None},
        {"location": ""},
        {"is_paid": True, "price": None},
        {"is_paid": True, "price": "0"},
    ])
    async def test_missing_required_data(self, course_service, users, overrides):
        with pytest.raises(InvalidCourseData):
            await course_service.create_course(INSTRUCTOR_ID, course_payload(**overrides))


@pytest.mark.asyncio
class TestCourseQueries:
    """课程查询与修改"""

    async def test_get_course_cache_hit(self, course_service, mock_cache):
        mock_cache.get.return_value = Course(
            course_id="course_001", title="Depuis le cache", instructor_id=INSTRUCTOR_ID
        ).model_dump(mode="json")
        course_service.course_repo = AsyncMock(spec=CourseRepository)

        course = await course_service.get_course("course_001")

        assert course.title == "Depuis le cache"
        course_service.course_repo.get.assert_not_called()

    async def test_get_course_cache_miss_populates_cache(self, course_service, mock_cache, make_course):
        created = await make_course()

        course = await course_service.get_course(created.course_id)

        assert course.course_id == created.course_id
        mock_cache.set.assert_called_once()
        assert mock_cache.set.call_args[0][0] == f"detail:{created.course_id}"

    async def test_get_missing_course(self, course_service):
        with pytest.raises(CourseNotFound):
            await course_service.get_course("NONEXISTENT_COURSE_ID")

    async def test_update_only_editable_fields(self, course_service, mock_cache, make_course):
        created = await make_course()

        updated = await course_service.update_course(
            created.course_id, INSTRUCTOR_ID, CourseUpdate(title="Nouveau titre")
        )

        assert updated.title == "Nouveau titre"
        assert updated.description == created.description
        assert updated.week_days == created.week_days
        mock_cache.delete.assert_called_with(f"detail:{created.course_id}")

    async def test_update_requires_owner(self, course_service, make_course):
        created = await make_course()
        with pytest.raises(NotCourseOwner):
            await course_service.update_course(created.course_id, "student_001", CourseUpdate(title="x"))

    async def test_pending_requests_newest_first(self, course_service, request_repo, make_course):
        course = await make_course()
        now = datetime(2024, 1, 1, 12, 0)
        await request_repo.create({"request_id": "r_old", "course_id": course.course_id, "student_id": "s1",
                                   "status": "pending", "created_at": now})
        await request_repo.create({"request_id": "r_new", "course_id": course.course_id, "student_id": "s2",
                                   "status": "pending", "created_at": now + timedelta(hours=1)})
        await request_repo.create({"request_id": "r_done", "course_id": course.course_id, "student_id": "s3",
                                   "status": "accepted", "created_at": now + timedelta(hours=2)})

        requests = await course_service.list_pending_requests(course.course_id)

        assert [r.request_id for r in requests] == ["r_new", "r_old"]

    async def test_instructor_courses_and_progress(self, course_service, progress_repo, make_course):
        course = await make_course()
        await progress_repo.create({
            "progress_id": f"student_001_{course.course_id}",
            "student_id": "student_001",
            "course_id": course.course_id,
            "progress_percent": 75.0,
            "completed_videos": ["v1", "v2"]
        })

        courses = await course_service.list_instructor_courses(INSTRUCTOR_ID)
        progress = await course_service.get_student_progress(course.course_id, "student_001")

        assert [c.course_id for c in courses] == [course.course_id]
        assert progress.progress_percent == 75.0
        assert progress.completed_videos == ["v1", "v2"]
        assert await course_service.get_student_progress(course.course_id, "student_002") is None
