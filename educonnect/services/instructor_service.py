"""
讲师收入与收款账户服务
收入汇总以 payments 表中已完成的支付记录为准
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from educonnect.core.exceptions import UserNotFound
from educonnect.models.instructor import EarningsSummary, PayoutAccountStatus
from educonnect.models.payment import Payment, TransferStatus
from educonnect.models.schedule import add_months
from educonnect.repositories.course_repository import CourseRepository
from educonnect.repositories.payment_repository import PaymentRepository
from educonnect.repositories.user_repository import UserRepository
from educonnect.services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

RECENT_PAYMENTS_LIMIT = 5


def _total(payments: Iterable[Payment]) -> Decimal:
    return sum((p.instructor_amount for p in payments), Decimal("0"))


def _paid_on(payment: Payment) -> Optional[date]:
    return payment.created_at.date() if payment.created_at else None


class InstructorService:
    """讲师服务"""

    def __init__(
        self,
        payment_repo: PaymentRepository,
        course_repo: CourseRepository,
        user_repo: UserRepository,
        payment_gateway: PaymentGateway,
        clock: Callable[[], date] = date.today
    ):
        self.payment_repo = payment_repo
        self.course_repo = course_repo
        self.user_repo = user_repo
        self.payment_gateway = payment_gateway
        self.clock = clock

    async def get_earnings(self, instructor_id: str) -> EarningsSummary:
        """
        讲师收入汇总
        本月从当月1日起算，上月为上月1日至本月1日之前；
        分账已完成的计入可用资金，其余计入待处理资金
        """
        payments = await self.payment_repo.get_by_instructor(instructor_id)
        courses = await self.course_repo.get_by_instructor(instructor_id)

        this_month_start = self.clock().replace(day=1)
        last_month_start = add_months(this_month_start, -1)

        this_month = [p for p in payments if _paid_on(p) and _paid_on(p) >= this_month_start]
        last_month = [
            p for p in payments
            if _paid_on(p) and last_month_start <= _paid_on(p) < this_month_start
        ]
        this_month_earnings = _total(this_month)
        last_month_earnings = _total(last_month)

        if last_month_earnings > 0:
            growth = (this_month_earnings - last_month_earnings) / last_month_earnings * 100
            monthly_growth = float(growth.quantize(Decimal("0.01")))
        else:
            monthly_growth = 100.0

        students = {p.student_id for p in payments}
        for course in courses:
            students.update(course.enrolled_students)

        return EarningsSummary(
            instructor_id=instructor_id,
            total_courses=len(courses),
            total_students=len(students),
            payment_count=len(payments),
            total_earnings=_total(payments),
            this_month_earnings=this_month_earnings,
            last_month_earnings=last_month_earnings,
            monthly_growth=monthly_growth,
            available_funds=_total(p for p in payments if p.transfer_status == TransferStatus.COMPLETED),
            pending_funds=_total(p for p in payments if p.transfer_status != TransferStatus.COMPLETED),
            recent_payments=payments[:RECENT_PAYMENTS_LIMIT]
        )

    async def setup_payout_account(
        self,
        instructor_id: str,
        account_id: Optional[str] = None
    ) -> PayoutAccountStatus:
        """
        设置讲师收款账户
        传入账户ID时直接保存；否则已有账户时原样返回，没有时由支付服务商创建
        """
        user = await self.user_repo.get(instructor_id)
        if not user:
            raise UserNotFound(instructor_id)

        if account_id is None and user.payout_account_id:
            return PayoutAccountStatus(instructor_id=instructor_id, payout_account_id=user.payout_account_id)

        created = account_id is None
        if created:
            account_id = await self.payment_gateway.create_payee_account(
                user.email,
                user.display_name,
                {"user_id": instructor_id}
            )

        await self.user_repo.update(instructor_id, {"payout_account_id": account_id})
        logger.info(f"讲师 {instructor_id} 收款账户已设置: {account_id}")

        return PayoutAccountStatus(
            instructor_id=instructor_id,
            payout_account_id=account_id,
            created=created
        )
