"""
数据模型包初始化文件
"""

from .course import (
    Course,
    CourseCreate,
    CourseUpdate,
    CourseResponse,
    CourseType,
    calculate_final_price
)
from .enrollment import (
    EnrollmentRequest,
    EnrollmentStatus,
    EnrollmentOutcome,
    MaterializationReport,
    PurchaseOutcome
)
from .session import CourseSession
from .payment import (
    Payment,
    PaymentDetails,
    PaymentIntent,
    CardAuthorization,
    TransferResult,
    DeclineReason,
    TransferStatus,
    PaymentStatus
)
from .user import UserAccount
from .instructor import EarningsSummary, PayoutAccountSetup, PayoutAccountStatus
from .progress import CourseProgress
from .notification import Notification, NotificationType

__all__ = [
    "Course",
    "CourseCreate",
    "CourseUpdate",
    "CourseResponse",
    "CourseType",
    "calculate_final_price",
    "EnrollmentRequest",
    "EnrollmentStatus",
    "EnrollmentOutcome",
    "MaterializationReport",
    "PurchaseOutcome",
    "CourseSession",
    "Payment",
    "PaymentDetails",
    "PaymentIntent",
    "CardAuthorization",
    "TransferResult",
    "DeclineReason",
    "TransferStatus",
    "PaymentStatus",
    "UserAccount",
    "EarningsSummary",
    "PayoutAccountSetup",
    "PayoutAccountStatus",
    "CourseProgress",
    "Notification",
    "NotificationType"
]
