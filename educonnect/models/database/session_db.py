"""
课程日程数据库模型
"""

from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from educonnect.core.database import Base


class SessionDB(Base):
    """日程表 - 每条记录为一次具体的上课"""

    __tablename__ = "sessions"

    session_id = Column(String(50), primary_key=True, comment="日程ID")
    title = Column(String(200), nullable=False, comment="课程名称")
    description = Column(Text, default="", comment="课程描述")
    organizer = Column(String(100), default="", comment="讲师名称")
    organizer_id = Column(String(50), nullable=False, index=True, comment="讲师ID")
    teacher_name = Column(String(100), default="", comment="讲师名称")

    # 时间
    date = Column(String(10), nullable=False, index=True, comment="上课日期 YYYY-MM-DD")
    formatted_date = Column(String(50), default="", comment="展示用日期")
    start_time = Column(String(5), nullable=False, comment="开始时间")
    end_time = Column(String(5), nullable=False, comment="结束时间")
    time = Column(String(20), default="", comment="展示用时间段")

    # 地点
    location = Column(String(200), default="", comment="上课地点")
    meeting_link = Column(String(500), comment="线上链接")
    is_online = Column(Boolean, default=False, comment="是否线上")

    attendees = Column(Integer, default=2, comment="参与人数")
    max_attendees = Column(Integer, default=100, comment="最大人数")
    category = Column(String(50), default="", comment="分类")
    session_category = Column(String(50), default="course", comment="日程类型")

    # 参与者与重复信息
    created_by = Column(String(50), nullable=False, index=True, comment="日程所属学生")
    participants = Column(JSON, default=list, comment="参与者ID")
    is_repetitive = Column(Boolean, default=True, comment="是否重复日程")
    repetition_id = Column(String(120), nullable=False, index=True, comment="同一课程-学生的日程分组")
    repetition_frequency = Column(String(20), default="weekly", comment="重复频率")
    course_id = Column(String(50), nullable=False, index=True, comment="课程ID")
    is_course_session = Column(Boolean, default=True, comment="是否课程日程")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")

    __table_args__ = (
        {'comment': '日程表'}
    )
