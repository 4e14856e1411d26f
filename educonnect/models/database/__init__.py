"""
数据库模型包初始化文件
"""

from .course_db import CourseDB
from .enrollment_db import EnrollmentRequestDB
from .session_db import SessionDB
from .payment_db import PaymentDB
from .user_db import UserDB, CourseProgressDB, NotificationDB

__all__ = [
    "CourseDB",
    "EnrollmentRequestDB",
    "SessionDB",
    "PaymentDB",
    "UserDB",
    "CourseProgressDB",
    "NotificationDB"
]
