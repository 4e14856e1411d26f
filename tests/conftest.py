"""
测试配置文件 - pytest fixtures和共用配置
数据库使用临时文件上的SQLite，每个操作独立连接以支持并发写入
"""

import pytest
import pytest_asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from educonnect.core.database import Base
import educonnect.models.database  # noqa: F401
from educonnect.repositories import (
    CourseRepository,
    EnrollmentRequestRepository,
    SessionRepository,
    PaymentRepository,
    UserRepository,
    CourseProgressRepository,
    NotificationRepository
)
from educonnect.services.course_service import CourseService
from educonnect.services.enrollment_coordinator import EnrollmentCoordinator
from educonnect.services.notification_service import NotificationService
from educonnect.services.payment_gateway import SimulatedPaymentGateway
from educonnect.services.recurrence_expander import RecurrenceExpander


INSTRUCTOR_ID = "teacher_001"
STUDENT_ID = "student_001"
OTHER_STUDENT_ID = "student_002"
MODERATOR_ID = "admin_001"
TODAY = date(2024, 1, 1)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """测试数据库会话工厂"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'educonnect_test.db'}",
        poolclass=NullPool
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def course_repo(session_maker):
    return CourseRepository(session_maker)


@pytest.fixture
def request_repo(session_maker):
    return EnrollmentRequestRepository(session_maker)


@pytest.fixture
def session_repo(session_maker):
    return SessionRepository(session_maker)


@pytest.fixture
def payment_repo(session_maker):
    return PaymentRepository(session_maker)


@pytest.fixture
def user_repo(session_maker):
    return UserRepository(session_maker)


@pytest.fixture
def progress_repo(session_maker):
    return CourseProgressRepository(session_maker)


@pytest.fixture
def notification_repo(session_maker):
    return NotificationRepository(session_maker)


@pytest.fixture
def mock_cache():
    """模拟缓存"""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    cache.delete = AsyncMock(return_value=True)
    return cache


@pytest.fixture
def notifier(notification_repo, user_repo):
    return NotificationService(notification_repo, user_repo)


@pytest.fixture
def gateway():
    return SimulatedPaymentGateway()


@pytest.fixture
def expander():
    """固定“今天”为 2024-01-01"""
    return RecurrenceExpander(clock=lambda: TODAY)


@pytest.fixture
def coordinator(
    course_repo,
    request_repo,
    session_repo,
    payment_repo,
    user_repo,
    progress_repo,
    notifier,
    gateway,
    expander,
    mock_cache
):
    return EnrollmentCoordinator(
        course_repo=course_repo,
        request_repo=request_repo,
        session_repo=session_repo,
        payment_repo=payment_repo,
        user_repo=user_repo,
        progress_repo=progress_repo,
        notifier=notifier,
        payment_gateway=gateway,
        expander=expander,
        cache=mock_cache
    )


@pytest.fixture
def course_service(course_repo, request_repo, user_repo, progress_repo, mock_cache):
    service = CourseService(course_repo, request_repo, user_repo, progress_repo)
    service.cache = mock_cache
    return service


@pytest_asyncio.fixture
async def users(user_repo):
    """讲师、两名学生和一名管理员"""
    await user_repo.create({
        "user_id": INSTRUCTOR_ID,
        "name": "Marie Curie",
        "email": "marie@example.com",
        "profile_picture": "https://example.com/marie.png",
        "role": "teacher",
        "payout_account_id": "acct_test_001"
    })
    await user_repo.create({
        "user_id": STUDENT_ID,
        "name": "Alice Martin",
        "email": "alice@example.com",
        "role": "student"
    })
    await user_repo.create({
        "user_id": OTHER_STUDENT_ID,
        "name": "Bob Durand",
        "email": "bob@example.com",
        "role": "student"
    })
    await user_repo.create({
        "user_id": MODERATOR_ID,
        "name": "Admin",
        "email": "admin@example.com",
        "role": "admin"
    })
    return {
        "instructor": INSTRUCTOR_ID,
        "student": STUDENT_ID,
        "other_student": OTHER_STUDENT_ID,
        "moderator": MODERATOR_ID
    }


@pytest.fixture
def make_course(course_repo, users):
    """
    课程工厂
    默认：按周重复的免费定时课程，周一和周三 14:00-16:00，2024-01-01 至 2024-01-14
    """
    async def _make(**overrides):
        data = {
            "title": "Algèbre linéaire",
            "description": "Vecteurs, matrices et applications",
            "category": "mathematiques",
            "instructor_id": INSTRUCTOR_ID,
            "instructor_name": "Marie Curie",
            "course_type": "time-based",
            "schedule": "Lun, Mer • 14:00 - 16:00",
            "is_repetitive": True,
            "start_time": "14:00",
            "end_time": "16:00",
            "start_date": date(2024, 1, 1),
            "end_date": date(2024, 1, 14),
            "week_days": [1, 3],
            "is_online": False,
            "location": "Salle 101",
            "is_paid": False,
            "base_price": Decimal("0"),
            "final_price": Decimal("0"),
            "enrolled_students": [],
            "created_at": datetime.now(timezone.utc)
        }
        data.update(overrides)
        course_id = await course_repo.create(data)
        return await course_repo.get(course_id)

    return _make


@pytest.fixture
def make_paid_course(make_course):
    async def _make(**overrides):
        data = {
            "is_paid": True,
            "base_price": Decimal("100.00"),
            "final_price": Decimal("102.50")
        }
        data.update(overrides)
        return await make_course(**data)

    return _make
