"""
课程日程（单次上课记录）数据模型
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CourseSession(BaseModel):
    """由课程排课展开得到的一次具体上课记录"""

    model_config = ConfigDict(from_attributes=True)

    session_id: Optional[str] = None
    title: str
    description: str = ""
    organizer: str = ""
    organizer_id: str
    teacher_name: str = ""

    date: str = Field(..., description="ISO日期 YYYY-MM-DD")
    formatted_date: str = ""
    start_time: str
    end_time: str
    time: str = ""

    location: str = ""
    meeting_link: Optional[str] = None
    is_online: bool = False

    attendees: int = 2  # 学生 + 讲师
    max_attendees: int = 100
    category: str = "Cours 📚"
    session_category: str = "course"

    created_by: str
    participants: List[str] = Field(default_factory=list)
    is_repetitive: bool = True
    repetition_id: str
    repetition_frequency: str = "weekly"
    course_id: str
    is_course_session: bool = True

    created_at: Optional[datetime] = None
