"""
业务异常定义
校验类、前置条件类、支付拒绝、级联删除失败等错误均以带类型的异常抛出，
由API层统一转换为响应
"""

from typing import Any, Dict, List, Optional


class BusinessException(Exception):
    """业务异常基类"""

    code = "business_error"
    status_code = 400

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


# ========== 校验错误：未做任何持久化或网络调用 ==========

class ValidationFailure(BusinessException):
    code = "validation_error"
    status_code = 400


class InvalidScheduleFormat(ValidationFailure):
    code = "invalid_schedule_format"

    def __init__(self, schedule: str):
        super().__init__(
            "Format d'horaire invalide pour ce cours",
            details={"schedule": schedule}
        )


class NoWeekdaysSelected(ValidationFailure):
    code = "no_weekdays_selected"

    def __init__(self):
        super().__init__("Veuillez sélectionner au moins un jour de la semaine")


class InvalidWeekday(ValidationFailure):
    code = "invalid_weekday"

    def __init__(self, weekday: Any):
        super().__init__(
            "Jour de la semaine invalide",
            details={"weekday": weekday}
        )


class InvalidCourseDuration(ValidationFailure):
    code = "invalid_course_duration"


class InvalidCourseData(ValidationFailure):
    code = "invalid_course_data"


class PaymentValidationError(ValidationFailure):
    """银行卡表单字段校验失败"""

    code = "payment_validation_error"

    def __init__(self, field_errors: Dict[str, str]):
        super().__init__(
            "Informations de paiement invalides",
            details={"field_errors": field_errors}
        )
        self.field_errors = field_errors


# ========== 前置条件错误：状态未变更 ==========

class PreconditionFailure(BusinessException):
    code = "precondition_failed"
    status_code = 409


class PayoutNotConfigured(PreconditionFailure):
    code = "payout_not_configured"

    def __init__(self, instructor_id: str):
        super().__init__(
            "Le professeur n'a pas configuré son compte de paiement",
            details={"instructor_id": instructor_id}
        )


class DuplicatePendingRequest(PreconditionFailure):
    code = "duplicate_pending_request"

    def __init__(self, course_id: str, student_id: str, request_id: str):
        super().__init__(
            "Une demande d'inscription est déjà en attente pour ce cours",
            details={"course_id": course_id, "student_id": student_id, "request_id": request_id}
        )


class RequestNotPending(PreconditionFailure):
    code = "request_not_pending"

    def __init__(self, request_id: str, status: str):
        super().__init__(
            "Cette demande a déjà été traitée",
            details={"request_id": request_id, "status": status}
        )


class AlreadyEnrolled(PreconditionFailure):
    code = "already_enrolled"

    def __init__(self, course_id: str, student_id: str):
        super().__init__(
            "Vous êtes déjà inscrit à ce cours",
            details={"course_id": course_id, "student_id": student_id}
        )


class NotEnrolled(PreconditionFailure):
    code = "not_enrolled"

    def __init__(self, course_id: str, student_id: str):
        super().__init__(
            "L'étudiant n'est pas inscrit à ce cours",
            details={"course_id": course_id, "student_id": student_id}
        )


class PaidCourseRequiresCheckout(PreconditionFailure):
    code = "paid_course_requires_checkout"

    def __init__(self, course_id: str):
        super().__init__(
            "Ce cours est payant, veuillez passer par le paiement",
            details={"course_id": course_id}
        )


class NotAPaidCourse(PreconditionFailure):
    code = "not_a_paid_course"

    def __init__(self, course_id: str):
        super().__init__(
            "Ce cours est gratuit, veuillez envoyer une demande d'inscription",
            details={"course_id": course_id}
        )


class NotCourseOwner(PreconditionFailure):
    code = "not_course_owner"
    status_code = 403

    def __init__(self, course_id: str, actor_id: str):
        super().__init__(
            "Action réservée à l'enseignant du cours",
            details={"course_id": course_id, "actor_id": actor_id}
        )


# ========== 资源不存在 ==========

class NotFound(BusinessException):
    code = "not_found"
    status_code = 404


class CourseNotFound(NotFound):
    code = "course_not_found"

    def __init__(self, course_id: str):
        super().__init__("Cours introuvable", details={"course_id": course_id})


class RequestNotFound(NotFound):
    code = "request_not_found"

    def __init__(self, request_id: str):
        super().__init__("Demande introuvable", details={"request_id": request_id})


class UserNotFound(NotFound):
    code = "user_not_found"

    def __init__(self, user_id: str):
        super().__init__("Utilisateur non trouvé", details={"user_id": user_id})


# ========== 支付相关 ==========

class PaymentDeclined(BusinessException):
    """发卡行拒绝，未报名、未生成支付记录"""

    code = "payment_declined"
    status_code = 402

    def __init__(self, reason: str, message: str):
        super().__init__(message, details={"reason": reason})
        self.reason = reason


class PaymentProviderError(BusinessException):
    """支付服务商或网络错误"""

    code = "payment_provider_error"
    status_code = 502


class EnrollmentIncomplete(BusinessException):
    """支付已成功但报名流程未完成"""

    code = "enrollment_incomplete"
    status_code = 500

    def __init__(
        self,
        payment_intent_id: str,
        completed_steps: List[str],
        payment_id: Optional[str] = None,
        error: Optional[str] = None
    ):
        super().__init__(
            "Paiement réussi mais inscription incomplète, veuillez contacter le support",
            details={
                "payment_intent_id": payment_intent_id,
                "payment_id": payment_id,
                "completed_steps": completed_steps,
                "error": error
            }
        )
        self.payment_intent_id = payment_intent_id
        self.payment_id = payment_id
        self.completed_steps = completed_steps


# ========== 级联删除 ==========

class CascadeDeleteError(BusinessException):
    """级联删除未全部完成，课程文档保留以便重试"""

    code = "cascade_delete_failed"
    status_code = 503

    def __init__(self, course_id: str, failed_steps: Dict[str, str]):
        super().__init__(
            "La suppression du cours a échoué, veuillez réessayer",
            details={"course_id": course_id, "failed_steps": failed_steps}
        )
        self.course_id = course_id
        self.failed_steps = failed_steps
