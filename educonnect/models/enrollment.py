"""
报名申请及报名结果数据模型
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from educonnect.models.payment import Payment, TransferStatus


class EnrollmentStatus(str, Enum):
    """报名申请状态枚举"""
    PENDING = "pending"  # 待处理
    ACCEPTED = "accepted"  # 已接受
    REJECTED = "rejected"  # 已拒绝


class EnrollmentRequest(BaseModel):
    """免费课程报名申请"""

    model_config = ConfigDict(from_attributes=True)

    request_id: str = Field(..., description="申请ID")
    course_id: str = Field(..., description="课程ID")
    course_name: str = Field(default="", description="申请时的课程名称")
    student_id: str = Field(..., description="学生ID")
    student_name: str = Field(default="Unknown", description="申请时的学生名称")
    student_email: str = Field(default="")
    student_profile_picture: str = Field(default="")
    status: EnrollmentStatus = Field(default=EnrollmentStatus.PENDING)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_pending(self) -> bool:
        return self.status == EnrollmentStatus.PENDING


class MaterializationReport(BaseModel):
    """日程生成结果 - 部分失败时列出失败日期以便重试"""

    repetition_id: str
    expected_dates: List[str] = Field(default_factory=list)
    created_dates: List[str] = Field(default_factory=list)
    skipped_dates: List[str] = Field(default_factory=list, description="已存在而跳过的日期")
    failed_dates: List[str] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="整体失败原因，如排课格式错误")

    @property
    def is_complete(self) -> bool:
        return not self.failed_dates and self.error is None

    @property
    def created_count(self) -> int:
        return len(self.created_dates)


class EnrollmentOutcome(BaseModel):
    """报名状态变更结果，明确列出实际修改了哪些状态"""

    course_id: str
    student_id: str
    request_id: Optional[str] = None
    enrolled: bool = False
    student_added: bool = Field(default=False, description="本次是否写入了 enrolled_students")
    request_status: Optional[EnrollmentStatus] = None
    already_processed: bool = False
    sessions: Optional[MaterializationReport] = None
    sessions_removed: int = 0
    warnings: List[str] = Field(default_factory=list)


class PurchaseOutcome(BaseModel):
    """付费报名结果"""

    payment: Payment
    enrollment: EnrollmentOutcome
    transfer_status: TransferStatus
    warnings: List[str] = Field(default_factory=list)
