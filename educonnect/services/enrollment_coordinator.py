"""
报名协调服务
负责学生与课程之间的全部状态变更：
免费课程 申请 -> 接受/拒绝，付费课程 支付 -> 报名，以及移除学生和删除课程。

存储层不提供跨文档事务，enrolled_students 采用最后写入者胜出，
每次写入前都重新读取课程并去重。日程写入为并发的独立写操作，
部分失败不回滚报名，失败日期在结果中列出，可通过 materialize_sessions 重试。
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from educonnect.core.config import settings
from educonnect.core.exceptions import (
    AlreadyEnrolled,
    CascadeDeleteError,
    CourseNotFound,
    DuplicatePendingRequest,
    EnrollmentIncomplete,
    NotAPaidCourse,
    NotCourseOwner,
    NotEnrolled,
    PaidCourseRequiresCheckout,
    PaymentDeclined,
    PaymentProviderError,
    PaymentValidationError,
    PayoutNotConfigured,
    RequestNotFound,
    RequestNotPending,
    UserNotFound
)
from educonnect.models.course import Course
from educonnect.models.enrollment import (
    EnrollmentOutcome,
    EnrollmentRequest,
    EnrollmentStatus,
    MaterializationReport,
    PurchaseOutcome
)
from educonnect.models.notification import NotificationType, SYSTEM_SENDER
from educonnect.models.payment import PaymentDetails, TransferResult, TransferStatus
from educonnect.models.session import CourseSession
from educonnect.models.user import UserAccount
from educonnect.repositories.course_repository import CourseRepository
from educonnect.repositories.enrollment_request_repository import EnrollmentRequestRepository
from educonnect.repositories.payment_repository import PaymentRepository
from educonnect.repositories.session_repository import SessionRepository
from educonnect.repositories.user_repository import UserRepository, CourseProgressRepository
from educonnect.services.common_cache import SimpleCache, course_cache
from educonnect.services.notification_service import NotificationService
from educonnect.services.payment_gateway import PaymentGateway
from educonnect.services.recurrence_expander import RecurrenceExpander, repetition_id

logger = logging.getLogger(__name__)

SESSIONS_INCOMPLETE_WARNING = "Inscription confirmée, mais votre emploi du temps peut être incomplet - contactez le support"
TRANSFER_PENDING_WARNING = "Le versement au professeur est en attente"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class EnrollmentCoordinator:
    """报名状态机"""

    def __init__(
        self,
        course_repo: CourseRepository,
        request_repo: EnrollmentRequestRepository,
        session_repo: SessionRepository,
        payment_repo: PaymentRepository,
        user_repo: UserRepository,
        progress_repo: CourseProgressRepository,
        notifier: NotificationService,
        payment_gateway: PaymentGateway,
        expander: Optional[RecurrenceExpander] = None,
        cache: SimpleCache = course_cache
    ):
        self.course_repo = course_repo
        self.request_repo = request_repo
        self.session_repo = session_repo
        self.payment_repo = payment_repo
        self.user_repo = user_repo
        self.progress_repo = progress_repo
        self.notifier = notifier
        self.payment_gateway = payment_gateway
        self.expander = expander or RecurrenceExpander()
        self.cache = cache

    # ========== 内部工具 ==========

    async def _load_course(self, course_id: str) -> Course:
        """总是从存储重新读取，不经过缓存"""
        course = await self.course_repo.get(course_id)
        if not course:
            raise CourseNotFound(course_id)
        return course

    async def _load_user(self, user_id: str) -> UserAccount:
        user = await self.user_repo.get(user_id)
        if not user:
            raise UserNotFound(user_id)
        return user

    async def _load_request(self, request_id: str) -> EnrollmentRequest:
        request = await self.request_repo.get(request_id)
        if not request:
            raise RequestNotFound(request_id)
        return request

    def _ensure_instructor(self, course: Course, actor_id: str, is_moderator: bool = False) -> None:
        if course.instructor_id != actor_id and not is_moderator:
            raise NotCourseOwner(course.course_id, actor_id)

    async def _invalidate(self, course_id: str) -> None:
        await self.cache.delete(f"detail:{course_id}")

    async def _add_student(self, course_id: str, student_id: str) -> bool:
        """加入 enrolled_students，已存在时不写入并返回False"""
        course = await self._load_course(course_id)
        if course.is_enrolled(student_id):
            return False

        students = list(dict.fromkeys(course.enrolled_students + [student_id]))
        await self.course_repo.update(course_id, {"enrolled_students": students})
        await self._invalidate(course_id)
        logger.info(f"学生 {student_id} 加入课程 {course_id}")
        return True

    async def _drop_student(self, course_id: str, student_id: str) -> bool:
        course = await self._load_course(course_id)
        if not course.is_enrolled(student_id):
            return False

        students = [s for s in course.enrolled_students if s != student_id]
        await self.course_repo.update(course_id, {"enrolled_students": students})
        await self._invalidate(course_id)
        logger.info(f"学生 {student_id} 移出课程 {course_id}")
        return True

    def _build_sessions(self, course: Course, student_id: str) -> Optional[List[CourseSession]]:
        """
        纯计算，排课格式或星期错误在任何写入之前抛出
        不需要日程的课程返回None
        """
        if not course.requires_sessions:
            return None
        return self.expander.build_session_records(course, student_id, course.instructor_id)

    async def _persist_sessions(
        self,
        course_id: str,
        student_id: str,
        records: List[CourseSession]
    ) -> MaterializationReport:
        """
        并发写入日程
        写入前重新确认学生仍在课程中，已存在的日期跳过，单条失败不影响其他日期
        """
        group_id = repetition_id(course_id, student_id)
        report = MaterializationReport(
            repetition_id=group_id,
            expected_dates=[r.date for r in records]
        )

        course = await self._load_course(course_id)
        if not course.is_enrolled(student_id):
            report.error = f"L'étudiant {student_id} n'est plus inscrit à ce cours"
            logger.warning(f"学生 {student_id} 已不在课程 {course_id} 中，跳过日程生成")
            return report

        existing_dates = {s.date for s in await self.session_repo.get_by_repetition_id(group_id)}
        pending = []
        for record in records:
            if record.date in existing_dates:
                report.skipped_dates.append(record.date)
            else:
                pending.append(record)

        created_at = _now()
        results = await asyncio.gather(
            *(
                self.session_repo.create({
                    **record.model_dump(exclude={"session_id", "created_at"}),
                    "created_at": created_at
                })
                for record in pending
            ),
            return_exceptions=True
        )

        for record, result in zip(pending, results):
            if isinstance(result, Exception):
                report.failed_dates.append(record.date)
                logger.error(f"日程写入失败 {group_id} {record.date}: {result}")
            else:
                report.created_dates.append(record.date)

        if report.failed_dates:
            logger.warning(
                f"日程部分写入失败 {group_id}: 成功 {report.created_count}，失败 {len(report.failed_dates)}"
            )
        else:
            logger.info(f"日程写入完成 {group_id}: 新增 {report.created_count}，跳过 {len(report.skipped_dates)}")
        return report

    # ========== 免费课程：申请流程 ==========

    async def request_enrollment(self, course_id: str, student_id: str) -> EnrollmentRequest:
        """学生提交报名申请"""
        course = await self._load_course(course_id)
        if course.is_paid:
            raise PaidCourseRequiresCheckout(course_id)
        if course.is_enrolled(student_id):
            raise AlreadyEnrolled(course_id, student_id)

        existing = await self.request_repo.find_pending(course_id, student_id)
        if existing:
            raise DuplicatePendingRequest(course_id, student_id, existing.request_id)

        student = await self._load_user(student_id)
        try:
            request_id = await self.request_repo.create({
                "course_id": course_id,
                "course_name": course.title,
                "student_id": student_id,
                "student_name": student.name or "Unknown",
                "student_email": student.email,
                "student_profile_picture": student.profile_picture,
                "status": EnrollmentStatus.PENDING,
                "created_at": _now(),
            })
        except IntegrityError:
            # 部署了待处理申请唯一索引时，并发申请由存储层拒绝
            existing = await self.request_repo.find_pending(course_id, student_id)
            if existing is None:
                raise
            raise DuplicatePendingRequest(course_id, student_id, existing.request_id)
        logger.info(f"学生 {student_id} 申请报名课程 {course_id}: {request_id}")

        await self.notifier.notify(
            student_id,
            course.instructor_id,
            NotificationType.COURSE_REQUEST,
            course_id=course_id,
            course_name=course.title
        )
        return await self._load_request(request_id)

    async def cancel_request(self, request_id: str, student_id: str) -> None:
        """学生撤回自己待处理的申请"""
        request = await self._load_request(request_id)
        if request.student_id != student_id:
            raise RequestNotFound(request_id)
        if not request.is_pending():
            raise RequestNotPending(request_id, request.status.value)

        await self.request_repo.delete(request_id)
        logger.info(f"学生 {student_id} 撤回报名申请 {request_id}")

    async def accept_request(self, request_id: str, actor_id: str) -> EnrollmentOutcome:
        """
        讲师接受申请
        对已接受的申请重复调用不做任何修改；日程写入部分失败时仍视为报名成功
        """
        request = await self._load_request(request_id)
        course = await self._load_course(request.course_id)
        self._ensure_instructor(course, actor_id)

        outcome = EnrollmentOutcome(
            course_id=course.course_id,
            student_id=request.student_id,
            request_id=request_id
        )

        if request.status == EnrollmentStatus.ACCEPTED:
            outcome.already_processed = True
            outcome.enrolled = course.is_enrolled(request.student_id)
            outcome.request_status = EnrollmentStatus.ACCEPTED
            return outcome
        if request.status != EnrollmentStatus.PENDING:
            raise RequestNotPending(request_id, request.status.value)

        records = self._build_sessions(course, request.student_id)

        outcome.student_added = await self._add_student(course.course_id, request.student_id)
        outcome.enrolled = True

        # 已存在的日期会跳过，重试时补齐上次中断未写入的日程
        if records is not None:
            outcome.sessions = await self._persist_sessions(course.course_id, request.student_id, records)
            if not outcome.sessions.is_complete:
                outcome.warnings.append(SESSIONS_INCOMPLETE_WARNING)

        await self.request_repo.update(request_id, {"status": EnrollmentStatus.ACCEPTED})
        outcome.request_status = EnrollmentStatus.ACCEPTED

        await self.notifier.notify(
            actor_id,
            request.student_id,
            NotificationType.COURSE_ACCEPTED,
            course_id=course.course_id,
            course_name=course.title
        )
        return outcome

    async def reject_request(self, request_id: str, actor_id: str) -> EnrollmentOutcome:
        """讲师拒绝申请，只修改申请状态"""
        request = await self._load_request(request_id)
        course = await self._load_course(request.course_id)
        self._ensure_instructor(course, actor_id)

        outcome = EnrollmentOutcome(
            course_id=course.course_id,
            student_id=request.student_id,
            request_id=request_id,
            enrolled=course.is_enrolled(request.student_id),
            request_status=EnrollmentStatus.REJECTED
        )

        if request.status == EnrollmentStatus.REJECTED:
            outcome.already_processed = True
            return outcome
        if request.status != EnrollmentStatus.PENDING:
            raise RequestNotPending(request_id, request.status.value)

        await self.request_repo.update(request_id, {"status": EnrollmentStatus.REJECTED})
        await self.notifier.notify(
            actor_id,
            request.student_id,
            NotificationType.COURSE_REJECTED,
            course_id=course.course_id,
            course_name=course.title
        )
        return outcome

    # ========== 付费课程：支付流程 ==========

    async def purchase_and_enroll(
        self,
        course_id: str,
        student_id: str,
        payment_details: PaymentDetails
    ) -> PurchaseOutcome:
        """
        付费报名

        校验和前置条件在任何支付请求之前完成；银行卡被拒时不写入任何数据；
        分账失败记为 pending 不影响报名；支付成功后的写入步骤失败时抛出 EnrollmentIncomplete
        """
        field_errors = payment_details.field_errors()
        if field_errors:
            raise PaymentValidationError(field_errors)

        course = await self._load_course(course_id)
        if not course.is_paid:
            raise NotAPaidCourse(course_id)
        if course.is_enrolled(student_id):
            raise AlreadyEnrolled(course_id, student_id)

        instructor = await self.user_repo.get(course.instructor_id)
        if not instructor or not instructor.payout_account_id:
            raise PayoutNotConfigured(course.instructor_id)
        student = await self._load_user(student_id)

        records = self._build_sessions(course, student_id)

        metadata = {
            "course_id": course.course_id,
            "course_name": course.title,
            "student_id": student_id,
            "student_email": student.email,
            "instructor_id": course.instructor_id,
            "instructor_account": instructor.payout_account_id,
            "base_price": str(course.base_price),
            "platform_fee": str(course.platform_fee),
        }

        # (a) 支付意图 (b) 银行卡授权
        try:
            intent = await self.payment_gateway.create_payment_intent(course.final_price, metadata)
            authorization = await self.payment_gateway.authorize_card(payment_details.clean_card_number)
        except PaymentProviderError:
            raise
        except Exception as e:
            logger.error(f"支付服务调用失败 课程 {course_id}: {e}")
            raise PaymentProviderError("Le service de paiement est indisponible") from e

        # (c) 被拒时不做任何写入
        if not authorization.approved:
            logger.info(f"课程 {course_id} 学生 {student_id} 支付被拒绝: {authorization.decline_reason}")
            raise PaymentDeclined(authorization.decline_reason.value, authorization.message)

        # (d) 讲师分账，失败不阻断报名
        try:
            transfer = await self.payment_gateway.transfer_to_payee(
                course.base_price,
                instructor.payout_account_id,
                {
                    "course_id": course.course_id,
                    "course_name": course.title,
                    "payment_intent": intent.payment_intent_id,
                }
            )
        except Exception as e:
            transfer = TransferResult(success=False, error=str(e))

        transfer_status = TransferStatus.COMPLETED if transfer.success else TransferStatus.PENDING
        warnings: List[str] = []
        if not transfer.success:
            logger.error(f"讲师分账失败 课程 {course_id} 支付 {intent.payment_intent_id}: {transfer.error}")
            warnings.append(TRANSFER_PENDING_WARNING)

        completed_steps: List[str] = []
        payment_id: Optional[str] = None
        try:
            # (e) 支付记录
            payment_id = await self.payment_repo.create({
                "course_id": course.course_id,
                "course_name": course.title,
                "student_id": student_id,
                "student_name": student.name or "Unknown",
                "student_email": student.email,
                "instructor_id": course.instructor_id,
                "instructor_name": course.instructor_name,
                "total_amount": course.final_price,
                "base_price": course.base_price,
                "platform_fee": course.platform_fee,
                "instructor_amount": course.base_price,
                "currency": settings.payment_currency.upper(),
                "status": "completed",
                "transfer_status": transfer_status,
                "transfer_error": transfer.error,
                "payment_method": "card",
                "card_last4": payment_details.card_last4,
                "stripe_payment_intent_id": intent.payment_intent_id,
                "stripe_transfer_id": transfer.transfer_id,
                "created_at": _now(),
            })
            completed_steps.append("payment_recorded")

            # (f) 加入课程
            student_added = await self._add_student(course.course_id, student_id)
            completed_steps.append("student_enrolled")

            # (g) 日程
            sessions = None
            if records is not None:
                sessions = await self._persist_sessions(course.course_id, student_id, records)
                if not sessions.is_complete:
                    warnings.append(SESSIONS_INCOMPLETE_WARNING)
            completed_steps.append("sessions_materialized")

            payment = await self.payment_repo.get(payment_id)

        except Exception as e:
            logger.error(
                f"支付成功但报名未完成 课程 {course_id} 学生 {student_id} "
                f"支付意图 {intent.payment_intent_id} 已完成步骤 {completed_steps}: {e}"
            )
            raise EnrollmentIncomplete(
                intent.payment_intent_id,
                completed_steps,
                payment_id=payment_id,
                error=str(e)
            ) from e

        # (h) 通知
        await self.notifier.notify(
            student_id,
            course.instructor_id,
            NotificationType.COURSE_PAYMENT,
            course_id=course.course_id,
            course_name=course.title,
            amount=course.base_price
        )
        await self.notifier.notify(
            SYSTEM_SENDER,
            student_id,
            NotificationType.COURSE_ENROLLMENT_CONFIRMED,
            course_id=course.course_id,
            course_name=course.title
        )

        logger.info(f"学生 {student_id} 付费报名课程 {course_id} 成功，支付记录 {payment_id}")
        return PurchaseOutcome(
            payment=payment,
            enrollment=EnrollmentOutcome(
                course_id=course.course_id,
                student_id=student_id,
                enrolled=True,
                student_added=student_added,
                sessions=sessions,
                warnings=list(warnings)
            ),
            transfer_status=transfer_status,
            warnings=warnings
        )

    # ========== 日程生成（可独立重试） ==========

    async def materialize_sessions(
        self,
        course_id: str,
        student_id: str,
        actor_id: Optional[str] = None,
        is_moderator: bool = False
    ) -> MaterializationReport:
        """为已报名学生补齐日程，已存在的日期不会重复创建"""
        course = await self._load_course(course_id)
        if actor_id is not None and actor_id != student_id:
            self._ensure_instructor(course, actor_id, is_moderator)
        if not course.is_enrolled(student_id):
            raise NotEnrolled(course_id, student_id)

        records = self._build_sessions(course, student_id)
        if records is None:
            return MaterializationReport(repetition_id=repetition_id(course_id, student_id))
        return await self._persist_sessions(course_id, student_id, records)

    # ========== 移除学生与删除课程 ==========

    async def remove_student(
        self,
        course_id: str,
        student_id: str,
        actor_id: str,
        is_moderator: bool = False
    ) -> EnrollmentOutcome:
        """讲师或管理员将学生移出课程，并删除该学生在本课程下的日程"""
        course = await self._load_course(course_id)
        self._ensure_instructor(course, actor_id, is_moderator)
        if not course.is_enrolled(student_id):
            raise NotEnrolled(course_id, student_id)

        await self._drop_student(course_id, student_id)
        outcome = EnrollmentOutcome(course_id=course_id, student_id=student_id, enrolled=False)

        sessions = await self.session_repo.get_by_repetition_id(repetition_id(course_id, student_id))
        results = await asyncio.gather(
            *(self.session_repo.delete(s.session_id) for s in sessions),
            return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, Exception)]
        outcome.sessions_removed = len(results) - len(failures)
        if failures:
            logger.error(f"删除学生 {student_id} 日程部分失败 课程 {course_id}: {failures[0]}")
            outcome.warnings.append(f"{len(failures)} session(s) n'ont pas pu être supprimée(s)")

        await self.notifier.notify(
            actor_id,
            student_id,
            NotificationType.COURSE_REMOVED,
            course_id=course_id,
            course_name=course.title
        )
        return outcome

    async def delete_course(
        self,
        course_id: str,
        actor_id: str,
        is_moderator: bool = False
    ) -> Dict[str, Any]:
        """
        删除课程并级联删除日程、报名申请和学习进度

        日程按 course_id 查询，包含已退出学生和讲师的日程。
        任一级联步骤失败时抛出 CascadeDeleteError，课程文档保留以便重试
        """
        course = await self._load_course(course_id)
        self._ensure_instructor(course, actor_id, is_moderator)

        lookups = await asyncio.gather(
            self.session_repo.query_by_field("course_id", course_id),
            self.request_repo.query_by_field("course_id", course_id),
            self.progress_repo.query_by_field("course_id", course_id),
            return_exceptions=True
        )
        failed_steps: Dict[str, str] = {}
        for name, result in zip(("sessions", "requests", "progress"), lookups):
            if isinstance(result, Exception):
                failed_steps[f"query_{name}"] = str(result)
        if failed_steps:
            logger.error(f"课程 {course_id} 级联查询失败: {failed_steps}")
            raise CascadeDeleteError(course_id, failed_steps)

        sessions, requests, progress = lookups
        targets = (
            [(f"session:{s.session_id}", self.session_repo.delete(s.session_id)) for s in sessions]
            + [(f"request:{r.request_id}", self.request_repo.delete(r.request_id)) for r in requests]
            + [(f"progress:{p.progress_id}", self.progress_repo.delete(p.progress_id)) for p in progress]
        )
        results = await asyncio.gather(*(op for _, op in targets), return_exceptions=True)
        for (name, _), result in zip(targets, results):
            if isinstance(result, Exception):
                failed_steps[name] = str(result)

        if failed_steps:
            logger.error(f"课程 {course_id} 级联删除失败 {len(failed_steps)} 项，课程保留")
            raise CascadeDeleteError(course_id, failed_steps)

        for student_id in course.enrolled_students:
            await self.notifier.notify(
                actor_id,
                student_id,
                NotificationType.COURSE_CANCELLED,
                course_id=course_id,
                course_name=course.title
            )

        await self.course_repo.delete(course_id)
        await self._invalidate(course_id)
        logger.info(
            f"课程 {course_id} 已删除: 日程 {len(sessions)}，申请 {len(requests)}，进度 {len(progress)}"
        )

        return {
            "course_id": course_id,
            "sessions_deleted": len(sessions),
            "requests_deleted": len(requests),
            "progress_deleted": len(progress),
            "students_notified": len(course.enrolled_students)
        }
