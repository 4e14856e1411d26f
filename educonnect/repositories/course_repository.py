"""
课程数据库操作层
"""

from typing import List

from sqlalchemy import select, desc

from educonnect.models.course import Course
from educonnect.models.database.course_db import CourseDB
from educonnect.repositories.base_repository import DocumentRepository


class CourseRepository(DocumentRepository[Course]):
    """课程数据库操作类"""

    db_model = CourseDB
    model = Course
    id_field = "course_id"

    async def get_by_instructor(self, instructor_id: str) -> List[Course]:
        """获取讲师的课程，按创建时间倒序"""
        async with self.session_maker() as session:
            result = await session.execute(
                select(CourseDB)
                .where(CourseDB.instructor_id == instructor_id)
                .order_by(desc(CourseDB.created_at))
            )
            rows = result.scalars().all()
        return [self.to_model(row) for row in rows]
