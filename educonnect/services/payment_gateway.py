"""
支付服务商适配层
提供支付意图、银行卡授权、讲师分账以及讲师收款账户创建。
固定的测试卡号按确定的原因拒绝，其余格式正确的卡号一律授权通过。
"""

import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple

import httpx
import structlog

from educonnect.core.config import settings
from educonnect.core.exceptions import PaymentProviderError
from educonnect.models.payment import (
    CardAuthorization,
    DeclineReason,
    PaymentIntent,
    TransferResult
)

logger = structlog.get_logger()


# 测试卡号 -> (拒绝原因, 展示给学生的提示)
DECLINE_SCENARIOS: Dict[str, Tuple[DeclineReason, str]] = {
    "4000000000000002": (DeclineReason.INSUFFICIENT_FUNDS, "Carte refusée - Fonds insuffisants"),
    "4000000000009995": (DeclineReason.LOST_OR_STOLEN, "Carte refusée - Carte perdue ou volée"),
    "4000000000009987": (DeclineReason.EXPIRED_CARD, "Carte refusée - Carte expirée"),
    "4000000000000069": (DeclineReason.EXPIRED_CARD, "Carte refusée - Carte expirée"),
    "4000000000000127": (DeclineReason.INCORRECT_CVC, "Carte refusée - Code CVV incorrect"),
    "4000000000000119": (DeclineReason.PROCESSING_ERROR, "Carte refusée - Erreur de traitement"),
    "4000000000003220": (DeclineReason.AUTHENTICATION_REQUIRED, "Carte refusée - Authentification 3D Secure requise"),
}


def to_cents(amount: Decimal) -> int:
    """金额转换为最小货币单位"""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway:
    """支付服务商接口"""

    async def create_payment_intent(self, amount: Decimal, metadata: Dict[str, str]) -> PaymentIntent:
        raise NotImplementedError

    async def authorize_card(self, card_number: str) -> CardAuthorization:
        """按卡号匹配拒绝场景，未命中则授权通过"""
        scenario = DECLINE_SCENARIOS.get(card_number)
        if scenario:
            reason, message = scenario
            logger.info("银行卡授权被拒绝", reason=reason.value, card_last4=card_number[-4:])
            return CardAuthorization(approved=False, decline_reason=reason, message=message)
        return CardAuthorization(approved=True)

    async def transfer_to_payee(
        self,
        amount: Decimal,
        payee_account: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> TransferResult:
        raise NotImplementedError

    async def create_payee_account(self, email: str, name: str, metadata: Optional[Dict[str, str]] = None) -> str:
        """为讲师创建收款账户，返回账户ID"""
        raise NotImplementedError

    async def close(self) -> None:
        return None


class SimulatedPaymentGateway(PaymentGateway):
    """无网络的模拟支付服务商，用于开发和测试"""

    def __init__(self, fail_transfers: bool = False):
        self.fail_transfers = fail_transfers

    async def create_payment_intent(self, amount: Decimal, metadata: Dict[str, str]) -> PaymentIntent:
        intent_id = f"pi_sim_{uuid.uuid4().hex[:16]}"
        logger.info("创建模拟支付意图", payment_intent_id=intent_id, amount=str(amount))
        return PaymentIntent(
            payment_intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:8]}"
        )

    async def create_payee_account(self, email: str, name: str, metadata: Optional[Dict[str, str]] = None) -> str:
        account_id = f"acct_sim_{uuid.uuid4().hex[:16]}"
        logger.info("创建模拟收款账户", account_id=account_id, email=email)
        return account_id

    async def transfer_to_payee(
        self,
        amount: Decimal,
        payee_account: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> TransferResult:
        if self.fail_transfers:
            logger.warning("模拟分账失败", payee_account=payee_account, amount=str(amount))
            return TransferResult(success=False, error="Transfert simulé en échec")
        return TransferResult(success=True, transfer_id=f"tr_test_{uuid.uuid4().hex[:16]}")


class StripePaymentGateway(PaymentGateway):
    """Stripe Connect REST接口实现"""

    def __init__(
        self,
        secret_key: str,
        api_base: str = settings.stripe_api_base,
        currency: str = settings.payment_currency,
        timeout: int = settings.stripe_timeout,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.secret_key = secret_key
        self.currency = currency
        self.client = httpx.AsyncClient(
            base_url=api_base,
            headers={"Authorization": f"Bearer {secret_key}"},
            timeout=timeout,
            transport=transport
        )

    @property
    def test_mode(self) -> bool:
        return "_test_" in self.secret_key

    async def _post(self, path: str, data: Dict[str, str]) -> dict:
        """发送表单请求，非2xx响应和网络错误统一转换为 PaymentProviderError"""
        try:
            response = await self.client.post(path, data=data)
        except httpx.HTTPError as e:
            logger.error("Stripe请求失败", path=path, error=str(e))
            raise PaymentProviderError(f"Stripe request failed: {e}") from e

        if response.is_error:
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = None
            logger.error("Stripe返回错误", path=path, status=response.status_code, error=message)
            raise PaymentProviderError(message or f"Stripe error {response.status_code}")

        return response.json()

    async def create_payment_intent(self, amount: Decimal, metadata: Dict[str, str]) -> PaymentIntent:
        data = {
            "amount": str(to_cents(amount)),
            "currency": self.currency,
            "description": f"Course enrollment: {metadata.get('course_name', '')}",
        }
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = str(value)

        body = await self._post("/payment_intents", data)
        logger.info("创建Stripe支付意图", payment_intent_id=body["id"], amount=str(amount))
        return PaymentIntent(payment_intent_id=body["id"], client_secret=body["client_secret"])

    async def transfer_to_payee(
        self,
        amount: Decimal,
        payee_account: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> TransferResult:
        """分账失败以结果返回，不抛出异常"""
        metadata = metadata or {}

        if self.test_mode:
            transfer_id = f"tr_test_{uuid.uuid4().hex[:16]}"
            logger.info("测试模式下模拟分账", transfer_id=transfer_id, amount=str(amount))
            return TransferResult(success=True, transfer_id=transfer_id)

        data = {
            "amount": str(to_cents(amount)),
            "currency": self.currency,
            "destination": payee_account,
            "description": f"Course payment: {metadata.get('course_name', '')}",
        }
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = str(value)

        try:
            body = await self._post("/transfers", data)
        except PaymentProviderError as e:
            return TransferResult(success=False, error=e.message)
        return TransferResult(success=True, transfer_id=body["id"])

    async def create_payee_account(self, email: str, name: str, metadata: Optional[Dict[str, str]] = None) -> str:
        """创建 Stripe Connect Express 账户，失败时抛出 PaymentProviderError"""
        data = {
            "type": "express",
            "email": email,
            "business_profile[name]": name,
            "capabilities[transfers][requested]": "true",
        }
        for key, value in (metadata or {}).items():
            data[f"metadata[{key}]"] = str(value)

        body = await self._post("/accounts", data)
        logger.info("创建Stripe收款账户", account_id=body["id"], email=email)
        return body["id"]

    async def close(self) -> None:
        await self.client.aclose()


def get_payment_gateway() -> PaymentGateway:
    """配置了Stripe密钥时使用Stripe，否则使用模拟实现"""
    if settings.stripe_secret_key:
        return StripePaymentGateway(settings.stripe_secret_key)
    return SimulatedPaymentGateway()
