"""
学习进度数据模型（由视频观看模块写入，此处只读）
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


def progress_id(student_id: str, course_id: str) -> str:
    return f"{student_id}_{course_id}"


class CourseProgress(BaseModel):

    model_config = ConfigDict(from_attributes=True)

    progress_id: str
    student_id: str
    course_id: str
    progress_percent: float = Field(default=0.0, ge=0, le=100)
    completed_videos: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None
