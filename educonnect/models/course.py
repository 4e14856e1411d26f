"""
课程相关数据模型
"""

from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime, date
from typing import List, Optional, Any, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from educonnect.models.schedule import normalize_calendar_date


PLATFORM_FEE_RATE = Decimal("0.025")
CENT = Decimal("0.01")


class CourseType(str, Enum):
    """课程类型枚举"""
    TIME_BASED = "time-based"
    VIDEO_BASED = "video-based"


def calculate_final_price(base_price: Union[Decimal, float, int, str], fee_rate: Union[Decimal, float, str] = PLATFORM_FEE_RATE) -> Decimal:
    """学生支付价格 = 讲师定价 × (1 + 平台费率)，保留两位小数"""
    base = Decimal(str(base_price))
    rate = Decimal(str(fee_rate))
    return (base * (Decimal("1") + rate)).quantize(CENT, rounding=ROUND_HALF_UP)


class Course(BaseModel):
    """课程基础模型"""

    model_config = ConfigDict(from_attributes=True)

    course_id: str = Field(..., description="课程唯一标识")
    title: str = Field(..., min_length=1, max_length=200, description="课程名称")
    description: str = Field(default="", description="课程描述")
    category: Optional[str] = Field(None, description="课程分类")
    thumbnail: Optional[str] = Field(None, description="封面图片地址")

    instructor_id: str = Field(..., description="讲师ID")
    instructor_name: str = Field(default="", description="讲师名称")
    instructor_profile_picture: Optional[str] = None

    course_type: CourseType = Field(default=CourseType.TIME_BASED, description="课程类型")
    schedule: Optional[str] = Field(None, description="展示用排课字符串")
    is_repetitive: bool = Field(default=False, description="是否按周重复")
    start_time: Optional[str] = Field(None, description="开始时间 HH:MM")
    end_time: Optional[str] = Field(None, description="结束时间 HH:MM")
    start_date: Optional[date] = Field(None, description="开课日期（含）")
    end_date: Optional[date] = Field(None, description="结课日期（含）")
    week_days: List[int] = Field(default_factory=list, description="上课星期，0=周日")

    is_online: bool = Field(default=False)
    online_link: Optional[str] = None
    location: Optional[str] = None

    is_paid: bool = Field(default=False)
    base_price: Decimal = Field(default=Decimal("0"), ge=0, description="讲师定价")
    final_price: Decimal = Field(default=Decimal("0"), ge=0, description="学生支付价格")

    enrolled_students: List[str] = Field(default_factory=list, description="已报名学生ID")
    videos: Optional[List[Any]] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return normalize_calendar_date(v)

    @field_validator("week_days", "enrolled_students", mode="before")
    @classmethod
    def default_empty_list(cls, v):
        return v or []

    @property
    def platform_fee(self) -> Decimal:
        """平台手续费"""
        return self.final_price - self.base_price

    @property
    def requires_sessions(self) -> bool:
        """按周重复的定时课程报名后需要生成日程"""
        return self.course_type == CourseType.TIME_BASED and self.is_repetitive

    def is_enrolled(self, student_id: str) -> bool:
        return student_id in self.enrolled_students


class CourseCreate(BaseModel):
    """创建课程数据模型"""

    title: str = Field(default="", max_length=200)
    description: str = Field(default="", max_length=5000)
    category: Optional[str] = None
    thumbnail: Optional[str] = None
    course_type: CourseType = CourseType.TIME_BASED

    is_repetitive: bool = False
    start_time: Optional[str] = Field(None, pattern=r"^\d{1,2}:\d{2}$")
    end_time: Optional[str] = Field(None, pattern=r"^\d{1,2}:\d{2}$")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    week_days: List[int] = Field(default_factory=list)

    is_online: bool = False
    online_link: Optional[str] = None
    location: Optional[str] = None

    is_paid: bool = False
    price: Optional[Decimal] = Field(None, description="讲师定价，付费课程必填")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return normalize_calendar_date(v)


class CourseUpdate(BaseModel):
    """更新课程数据模型 - 排课与价格创建后不可修改"""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    category: Optional[str] = None
    thumbnail: Optional[str] = None


class CourseResponse(BaseModel):
    """课程响应模型 - 用于API返回"""

    course_id: str
    title: str
    description: str
    category: Optional[str]
    thumbnail: Optional[str]
    instructor_id: str
    instructor_name: str
    course_type: CourseType
    schedule: Optional[str]
    is_repetitive: bool
    start_date: Optional[date]
    end_date: Optional[date]
    week_days: List[int]
    is_online: bool
    online_link: Optional[str]
    location: Optional[str]
    is_paid: bool
    base_price: Decimal
    final_price: Decimal
    platform_fee: Decimal
    student_count: int
    created_at: Optional[datetime]

    @classmethod
    def from_course(cls, course: Course) -> "CourseResponse":
        """从Course模型创建响应对象"""
        return cls(
            course_id=course.course_id,
            title=course.title,
            description=course.description,
            category=course.category,
            thumbnail=course.thumbnail,
            instructor_id=course.instructor_id,
            instructor_name=course.instructor_name,
            course_type=course.course_type,
            schedule=course.schedule,
            is_repetitive=course.is_repetitive,
            start_date=course.start_date,
            end_date=course.end_date,
            week_days=course.week_days,
            is_online=course.is_online,
            online_link=course.online_link,
            location=course.location,
            is_paid=course.is_paid,
            base_price=course.base_price,
            final_price=course.final_price,
            platform_fee=course.platform_fee,
            student_count=len(course.enrolled_students),
            created_at=course.created_at
        )
