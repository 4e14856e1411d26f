"""
站内通知数据模型
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict
from enum import Enum


SYSTEM_SENDER = "system"


class NotificationType(str, Enum):
    """课程相关通知类型"""
    COURSE_REQUEST = "course_request"
    COURSE_ACCEPTED = "course_accepted"
    COURSE_REJECTED = "course_rejected"
    COURSE_ENROLLMENT = "course_enrollment"
    COURSE_PAYMENT = "course_payment"
    COURSE_ENROLLMENT_CONFIRMED = "course_enrollment_confirmed"
    COURSE_CANCELLED = "course_cancelled"
    COURSE_REMOVED = "course_removed"


class Notification(BaseModel):

    model_config = ConfigDict(from_attributes=True)

    notification_id: str
    from_id: str
    from_name: str = ""
    from_avatar: str = ""
    to_id: str
    type: NotificationType
    message: str
    status: str = "unread"
    course_id: Optional[str] = None
    course_name: Optional[str] = None
    amount: Optional[Decimal] = None
    created_at: Optional[datetime] = None
