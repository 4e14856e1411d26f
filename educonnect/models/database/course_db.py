"""
课程数据库模型
"""

from sqlalchemy import Column, String, Numeric, Text, Boolean, DateTime, Date, JSON
from sqlalchemy.sql import func
from educonnect.core.database import Base


class CourseDB(Base):
    """课程数据库表"""

    __tablename__ = "courses"

    # 主键和基本信息
    course_id = Column(String(50), primary_key=True, comment="课程ID")
    title = Column(String(200), nullable=False, comment="课程名称")
    description = Column(Text, default="", comment="课程描述")
    category = Column(String(50), index=True, comment="课程分类")
    thumbnail = Column(String(500), comment="封面图片地址")

    # 讲师信息（创建时快照）
    instructor_id = Column(String(50), nullable=False, index=True, comment="讲师ID")
    instructor_name = Column(String(100), default="", comment="讲师名称")
    instructor_profile_picture = Column(String(500), comment="讲师头像")

    # 排课信息，仅定时课程
    course_type = Column(String(20), nullable=False, default="time-based", comment="课程类型")
    schedule = Column(String(200), comment="展示用排课字符串")
    is_repetitive = Column(Boolean, default=False, comment="是否按周重复")
    start_time = Column(String(5), comment="开始时间")
    end_time = Column(String(5), comment="结束时间")
    start_date = Column(Date, comment="开课日期")
    end_date = Column(Date, comment="结课日期")
    week_days = Column(JSON, default=list, comment="上课星期，0=周日")

    # 上课地点
    is_online = Column(Boolean, default=False, comment="是否线上")
    online_link = Column(String(500), comment="线上课程链接")
    location = Column(String(200), comment="线下上课地点")

    # 价格信息
    is_paid = Column(Boolean, default=False, comment="是否付费")
    base_price = Column(Numeric(10, 2), default=0, comment="讲师定价")
    final_price = Column(Numeric(10, 2), default=0, comment="学生支付价格")

    # 数组字段
    enrolled_students = Column(JSON, default=list, comment="已报名学生ID")
    videos = Column(JSON, comment="视频课程内容")

    # 时间
    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    __table_args__ = (
        {'comment': '课程信息表'}
    )
