"""
支付记录数据库模型
"""

from sqlalchemy import Column, String, Numeric, Text, DateTime
from sqlalchemy.sql import func
from educonnect.core.database import Base


class PaymentDB(Base):
    """支付记录表"""

    __tablename__ = "payments"

    payment_id = Column(String(50), primary_key=True, comment="支付记录ID")
    course_id = Column(String(50), nullable=False, index=True, comment="课程ID")
    course_name = Column(String(200), default="", comment="课程名称")
    student_id = Column(String(50), nullable=False, index=True, comment="学生ID")
    student_name = Column(String(100), default="", comment="学生名称")
    student_email = Column(String(200), default="", comment="学生邮箱")
    instructor_id = Column(String(50), nullable=False, index=True, comment="讲师ID")
    instructor_name = Column(String(100), default="", comment="讲师名称")

    # 金额信息
    total_amount = Column(Numeric(10, 2), nullable=False, comment="学生支付总额")
    base_price = Column(Numeric(10, 2), nullable=False, comment="讲师定价")
    platform_fee = Column(Numeric(10, 2), nullable=False, comment="平台手续费")
    instructor_amount = Column(Numeric(10, 2), nullable=False, comment="讲师分账金额")
    currency = Column(String(10), default="USD", comment="币种")

    # 状态
    status = Column(String(20), default="completed", comment="支付状态")
    transfer_status = Column(String(20), default="completed", index=True, comment="分账状态")
    transfer_error = Column(Text, comment="分账失败原因")
    payment_method = Column(String(20), default="card", comment="支付方式")
    card_last4 = Column(String(4), default="", comment="卡号后四位")

    # 支付服务商引用
    stripe_payment_intent_id = Column(String(100), default="", comment="Stripe支付意图ID")
    stripe_transfer_id = Column(String(100), comment="Stripe转账ID")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True, comment="创建时间")

    __table_args__ = (
        {'comment': '课程支付记录表'}
    )
