"""
支付记录数据库操作层
"""

from typing import List

from sqlalchemy import select, desc

from educonnect.models.payment import Payment, PaymentStatus
from educonnect.models.database.payment_db import PaymentDB
from educonnect.repositories.base_repository import DocumentRepository


class PaymentRepository(DocumentRepository[Payment]):
    """支付记录数据库操作类"""

    db_model = PaymentDB
    model = Payment
    id_field = "payment_id"

    async def get_by_instructor(self, instructor_id: str) -> List[Payment]:
        """讲师已完成的支付记录，按创建时间倒序"""
        async with self.session_maker() as session:
            result = await session.execute(
                select(PaymentDB)
                .where(
                    PaymentDB.instructor_id == instructor_id,
                    PaymentDB.status == PaymentStatus.COMPLETED.value
                )
                .order_by(desc(PaymentDB.created_at))
            )
            rows = result.scalars().all()
        return [self.to_model(row) for row in rows]
