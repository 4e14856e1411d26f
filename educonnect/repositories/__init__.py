"""
仓库包初始化文件 - 数据库访问层
"""

from .base_repository import DocumentRepository
from .course_repository import CourseRepository
from .enrollment_request_repository import EnrollmentRequestRepository
from .session_repository import SessionRepository
from .payment_repository import PaymentRepository
from .user_repository import UserRepository, CourseProgressRepository, NotificationRepository

__all__ = [
    "DocumentRepository",
    "CourseRepository",
    "EnrollmentRequestRepository",
    "SessionRepository",
    "PaymentRepository",
    "UserRepository",
    "CourseProgressRepository",
    "NotificationRepository"
]
