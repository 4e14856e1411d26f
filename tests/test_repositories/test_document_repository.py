"""
文档仓库数据库操作测试 - 使用临时SQLite数据库
"""

import pytest
from datetime import datetime
from decimal import Decimal

from educonnect.models.enrollment import EnrollmentStatus


@pytest.mark.asyncio
class TestDocumentRepository:
    """通用增删改查测试"""

    async def test_create_generates_id(self, course_repo, make_course):
        course = await make_course()
        assert course.course_id
        assert len(course.course_id) == 32

    async def test_create_keeps_given_id(self, user_repo):
        user_id = await user_repo.create({"user_id": "u_42", "name": "Claire"})
        assert user_id == "u_42"
        user = await user_repo.get("u_42")
        assert user.name == "Claire"

    async def test_create_ignores_unknown_fields(self, user_repo):
        user_id = await user_repo.create({"name": "Claire", "not_a_column": 1})
        assert await user_repo.get(user_id) is not None

    async def test_get_nonexistent(self, course_repo):
        assert await course_repo.get("NONEXISTENT_COURSE_ID") is None

    async def test_round_trip_course_fields(self, make_course):
        course = await make_course(is_paid=True, base_price=Decimal("49.99"), final_price=Decimal("51.24"))
        assert course.week_days == [1, 3]
        assert course.start_date.isoformat() == "2024-01-01"
        assert course.final_price == Decimal("51.24")
        assert course.course_type.value == "time-based"
        assert course.created_at is not None

    async def test_update_partial_fields(self, course_repo, make_course):
        course = await make_course()
        assert await course_repo.update(course.course_id, {"enrolled_students": ["s1", "s2"]})

        updated = await course_repo.get(course.course_id)
        assert updated.enrolled_students == ["s1", "s2"]
        assert updated.title == course.title

    async def test_update_nonexistent(self, course_repo):
        assert not await course_repo.update("NONEXISTENT_COURSE_ID", {"title": "x"})

    async def test_delete(self, course_repo, make_course):
        course = await make_course()
        assert await course_repo.delete(course.course_id)
        assert await course_repo.get(course.course_id) is None
        assert not await course_repo.delete(course.course_id)

    async def test_query_by_field(self, course_repo, make_course):
        await make_course(title="Cours A")
        await make_course(title="Cours B")
        await make_course(title="Cours C", instructor_id="teacher_999")

        courses = await course_repo.query_by_field("instructor_id", "teacher_001")
        assert sorted(c.title for c in courses) == ["Cours A", "Cours B"]

    async def test_query_by_unknown_field(self, course_repo):
        with pytest.raises(ValueError):
            await course_repo.query_by_field("no_such_field", "x")

    async def test_query_by_enum_value(self, request_repo):
        await request_repo.create({"course_id": "c1", "student_id": "s1", "status": EnrollmentStatus.PENDING})
        await request_repo.create({"course_id": "c1", "student_id": "s2", "status": EnrollmentStatus.REJECTED})

        pending = await request_repo.query_by_field("status", EnrollmentStatus.PENDING)
        assert [r.student_id for r in pending] == ["s1"]


@pytest.mark.asyncio
class TestSpecializedQueries:

    async def test_find_pending_request(self, request_repo):
        await request_repo.create({"course_id": "c1", "student_id": "s1", "status": "rejected"})
        assert await request_repo.find_pending("c1", "s1") is None

        request_id = await request_repo.create({"course_id": "c1", "student_id": "s1", "status": "pending"})
        found = await request_repo.find_pending("c1", "s1")
        assert found.request_id == request_id
        assert await request_repo.find_pending("c2", "s1") is None

    async def test_sessions_by_repetition_id_sorted_by_date(self, session_repo):
        base = {
            "title": "Cours",
            "organizer_id": "t1",
            "start_time": "14:00",
            "end_time": "16:00",
            "created_by": "s1",
            "course_id": "c1",
        }
        for day in ("2024-01-10", "2024-01-01", "2024-01-03"):
            await session_repo.create({**base, "date": day, "repetition_id": "course_c1_student_s1"})
        await session_repo.create({**base, "date": "2024-01-01", "repetition_id": "course_c1_student_s2"})

        sessions = await session_repo.get_by_repetition_id("course_c1_student_s1")
        assert [s.date for s in sessions] == ["2024-01-01", "2024-01-03", "2024-01-10"]

    async def test_instructor_courses(self, course_repo, make_course):
        await make_course(title="Premier")
        await make_course(title="Second", instructor_id="teacher_999")

        courses = await course_repo.get_by_instructor("teacher_001")
        assert [c.title for c in courses] == ["Premier"]

    async def test_instructor_completed_payments_newest_first(self, payment_repo):
        base = {
            "course_id": "c1",
            "student_id": "s1",
            "instructor_id": "t1",
            "total_amount": Decimal("10.25"),
            "base_price": Decimal("10.00"),
            "platform_fee": Decimal("0.25"),
            "instructor_amount": Decimal("10.00"),
        }
        await payment_repo.create({**base, "payment_id": "p_old", "created_at": datetime(2024, 1, 1)})
        await payment_repo.create({**base, "payment_id": "p_new", "created_at": datetime(2024, 2, 1)})
        await payment_repo.create({**base, "payment_id": "p_other", "instructor_id": "t2"})

        payments = await payment_repo.get_by_instructor("t1")
        assert [p.payment_id for p in payments] == ["p_new", "p_old"]
