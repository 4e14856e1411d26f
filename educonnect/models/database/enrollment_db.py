"""
报名申请数据库模型
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from educonnect.core.database import Base


class EnrollmentRequestDB(Base):
    """免费课程报名申请表"""

    __tablename__ = "course_requests"

    request_id = Column(String(50), primary_key=True, comment="申请ID")
    course_id = Column(String(50), nullable=False, index=True, comment="课程ID")
    course_name = Column(String(200), default="", comment="课程名称")

    # 学生信息（申请时快照）
    student_id = Column(String(50), nullable=False, index=True, comment="学生ID")
    student_name = Column(String(100), default="Unknown", comment="学生名称")
    student_email = Column(String(200), default="", comment="学生邮箱")
    student_profile_picture = Column(String(500), default="", comment="学生头像")

    status = Column(String(20), default="pending", index=True, comment="申请状态")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    __table_args__ = (
        {'comment': '课程报名申请表'}
    )
