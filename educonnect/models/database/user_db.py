"""
用户、学习进度与通知数据库模型
"""

from sqlalchemy import Column, String, Float, Numeric, Text, DateTime, JSON
from sqlalchemy.sql import func
from educonnect.core.database import Base


class UserDB(Base):
    """用户表（由账户系统维护）"""

    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True, comment="用户ID")
    name = Column(String(100), default="", comment="名称")
    email = Column(String(200), default="", index=True, comment="邮箱")
    profile_picture = Column(String(500), default="", comment="头像")
    role = Column(String(20), default="student", comment="角色")
    payout_account_id = Column(String(100), comment="Stripe Connect账户ID")

    __table_args__ = (
        {'comment': '用户表'}
    )


class CourseProgressDB(Base):
    """学习进度表"""

    __tablename__ = "course_progress"

    progress_id = Column(String(120), primary_key=True, comment="学生ID_课程ID")
    student_id = Column(String(50), nullable=False, index=True, comment="学生ID")
    course_id = Column(String(50), nullable=False, index=True, comment="课程ID")
    progress_percent = Column(Float, default=0.0, comment="完成百分比")
    completed_videos = Column(JSON, default=list, comment="已完成视频ID")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    __table_args__ = (
        {'comment': '学习进度表'}
    )


class NotificationDB(Base):
    """站内通知表"""

    __tablename__ = "notifications"

    notification_id = Column(String(50), primary_key=True, comment="通知ID")
    from_id = Column(String(50), nullable=False, comment="发送者ID")
    from_name = Column(String(100), default="", comment="发送者名称")
    from_avatar = Column(String(500), default="", comment="发送者头像")
    to_id = Column(String(50), nullable=False, index=True, comment="接收者ID")
    type = Column(String(50), nullable=False, comment="通知类型")
    message = Column(Text, nullable=False, comment="通知内容")
    status = Column(String(20), default="unread", comment="阅读状态")
    course_id = Column(String(50), index=True, comment="课程ID")
    course_name = Column(String(200), comment="课程名称")
    amount = Column(Numeric(10, 2), comment="金额")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")

    __table_args__ = (
        {'comment': '通知表'}
    )
