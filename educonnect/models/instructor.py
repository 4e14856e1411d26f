"""
讲师收入汇总与收款账户数据模型
"""

from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from educonnect.models.payment import Payment


class EarningsSummary(BaseModel):
    """讲师收入汇总，金额均为讲师分账金额"""

    instructor_id: str
    total_courses: int = 0
    total_students: int = Field(default=0, description="付费学生与已报名学生去重后的人数")
    payment_count: int = 0

    total_earnings: Decimal = Decimal("0")
    this_month_earnings: Decimal = Decimal("0")
    last_month_earnings: Decimal = Decimal("0")
    monthly_growth: float = Field(default=0.0, description="环比增长百分比，上月无收入时为100")

    available_funds: Decimal = Field(default=Decimal("0"), description="分账已完成")
    pending_funds: Decimal = Field(default=Decimal("0"), description="分账待处理")

    recent_payments: List[Payment] = Field(default_factory=list)


class PayoutAccountSetup(BaseModel):
    """收款账户设置，不传账户ID时由支付服务商创建"""

    account_id: Optional[str] = Field(None, pattern=r"^acct_[A-Za-z0-9_]+$")


class PayoutAccountStatus(BaseModel):

    instructor_id: str
    payout_account_id: str
    created: bool = Field(default=False, description="本次是否新建了服务商账户")
