"""
报名申请数据库操作层
"""

from typing import Optional

from sqlalchemy import select, and_

from educonnect.models.enrollment import EnrollmentRequest, EnrollmentStatus
from educonnect.models.database.enrollment_db import EnrollmentRequestDB
from educonnect.repositories.base_repository import DocumentRepository


class EnrollmentRequestRepository(DocumentRepository[EnrollmentRequest]):

    db_model = EnrollmentRequestDB
    model = EnrollmentRequest
    id_field = "request_id"

    async def find_pending(self, course_id: str, student_id: str) -> Optional[EnrollmentRequest]:
        """查找学生在该课程下待处理的申请"""
        async with self.session_maker() as session:
            result = await session.execute(
                select(EnrollmentRequestDB).where(
                    and_(
                        EnrollmentRequestDB.course_id == course_id,
                        EnrollmentRequestDB.student_id == student_id,
                        EnrollmentRequestDB.status == EnrollmentStatus.PENDING.value
                    )
                ).limit(1)
            )
            row = result.scalars().first()
        return self.to_model(row) if row is not None else None
