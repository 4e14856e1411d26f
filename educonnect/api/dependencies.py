"""
API依赖注入
当前用户由上游认证网关通过请求头传入，管理员身份以用户存储中的角色为准
"""

from fastapi import Depends, Header, Request

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
from educonnect.services.instructor_service import InstructorService
from educonnect.services.notification_service import NotificationService
from educonnect.services.payment_gateway import PaymentGateway, get_payment_gateway


async def get_current_user_id(x_user_id: str = Header(..., min_length=1)) -> str:
    """当前操作用户ID"""
    return x_user_id


def get_user_repository() -> UserRepository:
    return UserRepository()


async def get_is_moderator(
    user_id: str = Depends(get_current_user_id),
    user_repo: UserRepository = Depends(get_user_repository)
) -> bool:
    user = await user_repo.get(user_id)
    return bool(user and user.is_moderator)


def get_gateway(request: Request) -> PaymentGateway:
    """应用启动时创建的支付服务商实例"""
    gateway = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        gateway = get_payment_gateway()
        request.app.state.payment_gateway = gateway
    return gateway


def get_course_service() -> CourseService:
    return CourseService(
        course_repo=CourseRepository(),
        request_repo=EnrollmentRequestRepository(),
        user_repo=UserRepository(),
        progress_repo=CourseProgressRepository()
    )


def get_enrollment_coordinator(request: Request) -> EnrollmentCoordinator:
    user_repo = UserRepository()
    return EnrollmentCoordinator(
        course_repo=CourseRepository(),
        request_repo=EnrollmentRequestRepository(),
        session_repo=SessionRepository(),
        payment_repo=PaymentRepository(),
        user_repo=user_repo,
        progress_repo=CourseProgressRepository(),
        notifier=NotificationService(NotificationRepository(), user_repo),
        payment_gateway=get_gateway(request)
    )


def get_instructor_service(request: Request) -> InstructorService:
    return InstructorService(
        payment_repo=PaymentRepository(),
        course_repo=CourseRepository(),
        user_repo=UserRepository(),
        payment_gateway=get_gateway(request)
    )
