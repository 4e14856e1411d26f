"""
支付相关数据模型
"""

import re
from decimal import Decimal
from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


EXPIRY_PATTERN = re.compile(r"^(\d{2})/(\d{2})$")


class PaymentStatus(str, Enum):
    """支付状态枚举"""
    COMPLETED = "completed"


class TransferStatus(str, Enum):
    """讲师分账状态枚举"""
    COMPLETED = "completed"
    PENDING = "pending"  # 分账失败，等待重试


class DeclineReason(str, Enum):
    """银行卡拒绝原因"""
    INSUFFICIENT_FUNDS = "insufficient_funds"
    LOST_OR_STOLEN = "lost_or_stolen"
    EXPIRED_CARD = "expired_card"
    INCORRECT_CVC = "incorrect_cvc"
    PROCESSING_ERROR = "processing_error"
    AUTHENTICATION_REQUIRED = "authentication_required"
    GENERIC_DECLINE = "generic_decline"


class PaymentDetails(BaseModel):
    """支付表单原始输入，字段校验在发起任何支付请求前完成"""

    cardholder_name: str = ""
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""

    @property
    def clean_card_number(self) -> str:
        return re.sub(r"\s+", "", self.card_number)

    @property
    def card_last4(self) -> str:
        return self.clean_card_number[-4:]

    def field_errors(self) -> Dict[str, str]:
        """返回字段级错误，全部合法时返回空字典"""
        errors: Dict[str, str] = {}

        if not self.cardholder_name.strip():
            errors["cardholder_name"] = "Veuillez entrer le nom du titulaire"

        number = self.clean_card_number
        if len(number) != 16 or not number.isdigit():
            errors["card_number"] = "Numéro de carte invalide"

        match = EXPIRY_PATTERN.match(self.expiry_date.strip())
        if not match or not 1 <= int(match.group(1)) <= 12:
            errors["expiry_date"] = "Date d'expiration invalide"

        cvv = self.cvv.strip()
        if not 3 <= len(cvv) <= 4 or not cvv.isdigit():
            errors["cvv"] = "CVV invalide"

        return errors


class PaymentIntent(BaseModel):
    """支付意图"""

    payment_intent_id: str
    client_secret: str


class CardAuthorization(BaseModel):
    """银行卡授权结果"""

    approved: bool
    decline_reason: Optional[DeclineReason] = None
    message: Optional[str] = None


class TransferResult(BaseModel):
    """讲师分账结果"""

    success: bool
    transfer_id: Optional[str] = None
    error: Optional[str] = None


class Payment(BaseModel):
    """一次成功付费报名的支付记录，创建后不可变更（分账状态除外）"""

    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    course_id: str
    course_name: str = ""
    student_id: str
    student_name: str = "Unknown"
    student_email: str = ""
    instructor_id: str
    instructor_name: str = ""

    total_amount: Decimal = Field(..., ge=0)
    base_price: Decimal = Field(..., ge=0)
    platform_fee: Decimal = Field(..., ge=0)
    instructor_amount: Decimal = Field(..., ge=0)
    currency: str = "USD"

    status: PaymentStatus = PaymentStatus.COMPLETED
    transfer_status: TransferStatus = TransferStatus.COMPLETED
    transfer_error: Optional[str] = None
    payment_method: str = "card"
    card_last4: str = ""
    stripe_payment_intent_id: str = ""
    stripe_transfer_id: Optional[str] = None

    created_at: Optional[datetime] = None
