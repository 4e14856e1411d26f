"""
课程日程数据库操作层
"""

from typing import List

from educonnect.models.session import CourseSession
from educonnect.models.database.session_db import SessionDB
from educonnect.repositories.base_repository import DocumentRepository


class SessionRepository(DocumentRepository[CourseSession]):

    db_model = SessionDB
    model = CourseSession
    id_field = "session_id"

    async def get_by_repetition_id(self, repetition_id: str) -> List[CourseSession]:
        """获取同一课程-学生分组下的全部日程，按日期排序"""
        sessions = await self.query_by_field("repetition_id", repetition_id)
        return sorted(sessions, key=lambda s: s.date)
