"""
站内通知服务
通知为即发即弃：写入失败只记录日志，不影响调用方的业务结果
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from educonnect.models.notification import NotificationType, SYSTEM_SENDER
from educonnect.repositories.user_repository import UserRepository, NotificationRepository

logger = logging.getLogger(__name__)

SYSTEM_SENDER_NAME = "EduConnect"


def render_message(
    kind: NotificationType,
    sender_name: str,
    course_name: str = "",
    amount: Optional[Decimal] = None
) -> str:
    """按通知类型生成展示文案"""
    if kind == NotificationType.COURSE_REQUEST:
        return f"{sender_name} souhaite s'inscrire à votre cours \"{course_name}\" 📚"
    if kind == NotificationType.COURSE_ACCEPTED:
        return f"Votre demande d'inscription au cours \"{course_name}\" a été acceptée ! ✅"
    if kind == NotificationType.COURSE_REJECTED:
        return f"Votre demande d'inscription au cours \"{course_name}\" a été refusée ❌"
    if kind == NotificationType.COURSE_ENROLLMENT:
        return f"{sender_name} s'est inscrit à votre cours \"{course_name}\" 💰"
    if kind == NotificationType.COURSE_PAYMENT:
        return f"💸 Paiement reçu! {sender_name} a payé ${Decimal(amount or 0):.2f} pour \"{course_name}\""
    if kind == NotificationType.COURSE_ENROLLMENT_CONFIRMED:
        return f"✅ Inscription confirmée! Vous êtes maintenant inscrit au cours \"{course_name}\""
    if kind == NotificationType.COURSE_CANCELLED:
        return (
            f"🚫 Cours annulé! Le cours \"{course_name}\" a été supprimé par l'enseignant. "
            "Toutes les sessions ont été annulées."
        )
    if kind == NotificationType.COURSE_REMOVED:
        return f"Vous avez été retiré(e) du cours \"{course_name}\""
    raise ValueError(f"未知的通知类型: {kind}")


class NotificationService:
    """通知服务"""

    def __init__(self, notification_repo: NotificationRepository, user_repo: UserRepository):
        self.notification_repo = notification_repo
        self.user_repo = user_repo

    async def _sender(self, from_id: str) -> Dict[str, str]:
        if from_id == SYSTEM_SENDER:
            return {"name": SYSTEM_SENDER_NAME, "avatar": ""}

        user = await self.user_repo.get(from_id)
        if not user:
            return {"name": "Un utilisateur", "avatar": ""}
        return {"name": user.display_name, "avatar": user.profile_picture}

    async def notify(
        self,
        from_id: str,
        to_id: str,
        kind: NotificationType,
        **payload: Any
    ) -> Optional[str]:
        """
        发送通知
        发送者与接收者相同时不发送（系统通知除外），返回通知ID，未发送或失败时返回None
        """
        if from_id == to_id and from_id != SYSTEM_SENDER:
            return None

        try:
            kind = NotificationType(kind)
            sender = await self._sender(from_id)
            course_name = payload.get("course_name") or ""
            amount = payload.get("amount")

            notification_id = await self.notification_repo.create({
                "from_id": from_id,
                "from_name": sender["name"],
                "from_avatar": sender["avatar"],
                "to_id": to_id,
                "type": kind,
                "message": render_message(kind, sender["name"], course_name, amount),
                "status": "unread",
                "course_id": payload.get("course_id"),
                "course_name": course_name or None,
                "amount": amount,
                "created_at": datetime.now(timezone.utc)
            })
            logger.info(f"通知已发送: {kind.value} {from_id} -> {to_id}")
            return notification_id

        except Exception as e:
            logger.error(f"发送通知失败 {kind} {from_id} -> {to_id}: {e}")
            return None
