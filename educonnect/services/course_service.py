"""
课程业务服务层
提供课程创建、查询和基础信息修改，报名相关状态变更见 enrollment_coordinator
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from educonnect.core.config import settings
from educonnect.core.exceptions import (
    CourseNotFound,
    InvalidCourseData,
    InvalidCourseDuration,
    NotCourseOwner,
    UserNotFound
)
from educonnect.models.course import Course, CourseCreate, CourseUpdate, CourseType, calculate_final_price
from educonnect.models.enrollment import EnrollmentRequest
from educonnect.models.progress import CourseProgress, progress_id
from educonnect.models.schedule import format_schedule, time_to_minutes
from educonnect.repositories.course_repository import CourseRepository
from educonnect.repositories.enrollment_request_repository import EnrollmentRequestRepository
from educonnect.repositories.user_repository import UserRepository, CourseProgressRepository
from educonnect.services.common_cache import course_cache
from educonnect.services.recurrence_expander import parse_schedule, validate_week_days

logger = logging.getLogger(__name__)


class CourseService:
    """课程业务服务"""

    def __init__(
        self,
        course_repo: CourseRepository,
        request_repo: EnrollmentRequestRepository,
        user_repo: UserRepository,
        progress_repo: CourseProgressRepository
    ):
        self.course_repo = course_repo
        self.request_repo = request_repo
        self.user_repo = user_repo
        self.progress_repo = progress_repo
        self.cache = course_cache
        self.cache_ttl = 3600  # 1小时缓存

    def validate_course_data(self, data: CourseCreate) -> None:
        """创建前校验，任何写入之前完成"""
        if not data.title.strip() or not data.description.strip():
            raise InvalidCourseData("Veuillez remplir tous les champs requis")

        if data.course_type == CourseType.TIME_BASED:
            if not data.start_time or not data.end_time:
                raise InvalidCourseData("Veuillez spécifier l'horaire du cours")

            # 统一为补零格式后比较
            start_time, end_time = parse_schedule(f"{data.start_time} - {data.end_time}")
            duration = time_to_minutes(end_time) - time_to_minutes(start_time)
            if duration <= 0:
                raise InvalidCourseDuration("L'heure de fin doit être après l'heure de début")
            if duration > settings.max_course_duration_hours * 60:
                raise InvalidCourseDuration(
                    f"La durée du cours ne peut pas dépasser {settings.max_course_duration_hours} heures"
                )

            if data.is_repetitive:
                validate_week_days(data.week_days)

            if data.is_online and not (data.online_link or "").strip():
                raise InvalidCourseData("Veuillez fournir un lien pour le cours en ligne")
            if not data.is_online and not (data.location or "").strip():
                raise InvalidCourseData("Veuillez spécifier le lieu du cours")

        if data.is_paid and (data.price is None or data.price <= 0):
            raise InvalidCourseData("Veuillez spécifier un prix valide")

    async def create_course(self, instructor_id: str, data: CourseCreate) -> Course:
        """创建课程"""
        self.validate_course_data(data)

        instructor = await self.user_repo.get(instructor_id)
        if not instructor:
            raise UserNotFound(instructor_id)

        base_price = Decimal(str(data.price)) if data.is_paid else Decimal("0")
        final_price = calculate_final_price(base_price, settings.platform_fee_rate) if data.is_paid else Decimal("0")

        course_data = {
            "title": data.title.strip(),
            "description": data.description.strip(),
            "category": data.category,
            "thumbnail": data.thumbnail,
            "instructor_id": instructor_id,
            "instructor_name": instructor.display_name,
            "instructor_profile_picture": instructor.profile_picture,
            "course_type": data.course_type,
            "is_repetitive": False,
            "week_days": [],
            "is_online": data.is_online,
            "online_link": data.online_link if data.is_online else None,
            "location": None if data.is_online else data.location,
            "is_paid": data.is_paid,
            "base_price": base_price,
            "final_price": final_price,
            "enrolled_students": [],
            "created_at": datetime.now(timezone.utc),
        }

        if data.course_type == CourseType.TIME_BASED:
            start_time, end_time = parse_schedule(f"{data.start_time} - {data.end_time}")
            course_data.update({
                "start_time": start_time,
                "end_time": end_time,
                "schedule": format_schedule(sorted(set(data.week_days)), start_time, end_time, data.is_repetitive),
            })
            # 只有按周重复的课程保存排课区间
            if data.is_repetitive:
                course_data.update({
                    "is_repetitive": True,
                    "week_days": sorted(set(data.week_days)),
                    "start_date": data.start_date,
                    "end_date": data.end_date,
                })
        else:
            course_data["videos"] = []

        course_id = await self.course_repo.create(course_data)
        logger.info(f"讲师 {instructor_id} 创建课程 {course_id}")

        return await self.get_course(course_id, use_cache=False)

    async def get_course(self, course_id: str, use_cache: bool = True) -> Course:
        """获取课程详情，不存在时抛出 CourseNotFound"""
        cache_key = f"detail:{course_id}"

        if use_cache:
            cached_course = await self.cache.get(cache_key)
            if cached_course:
                return Course(**cached_course)

        course = await self.course_repo.get(course_id)
        if not course:
            raise CourseNotFound(course_id)

        if use_cache:
            await self.cache.set(cache_key, course.model_dump(mode="json"), ttl=self.cache_ttl)

        return course

    async def list_instructor_courses(self, instructor_id: str) -> List[Course]:
        return await self.course_repo.get_by_instructor(instructor_id)

    async def update_course(self, course_id: str, actor_id: str, data: CourseUpdate) -> Course:
        """修改课程基础信息，排课和价格创建后不可修改"""
        course = await self.course_repo.get(course_id)
        if not course:
            raise CourseNotFound(course_id)
        if course.instructor_id != actor_id:
            raise NotCourseOwner(course_id, actor_id)

        fields = data.model_dump(exclude_unset=True, exclude_none=True)
        if fields:
            await self.course_repo.update(course_id, fields)
            await self.cache.delete(f"detail:{course_id}")
            logger.info(f"课程 {course_id} 已更新: {list(fields)}")

        return await self.get_course(course_id, use_cache=False)

    async def list_pending_requests(self, course_id: str) -> List[EnrollmentRequest]:
        """课程待处理的报名申请，最新的在前"""
        requests = await self.request_repo.query_by_field("course_id", course_id)
        pending = [r for r in requests if r.is_pending()]
        pending.sort(key=lambda r: r.created_at.timestamp() if r.created_at else 0, reverse=True)
        return pending

    async def get_student_progress(self, course_id: str, student_id: str) -> Optional[CourseProgress]:
        return await self.progress_repo.get(progress_id(student_id, course_id))
