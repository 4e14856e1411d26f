"""
报名接口：免费课程申请、付费课程支付、移除学生
"""

from fastapi import APIRouter, Depends, Response, status

from educonnect.api.dependencies import get_current_user_id, get_enrollment_coordinator, get_is_moderator
from educonnect.models.enrollment import (
    EnrollmentOutcome,
    EnrollmentRequest,
    MaterializationReport,
    PurchaseOutcome
)
from educonnect.models.payment import PaymentDetails
from educonnect.services.enrollment_coordinator import EnrollmentCoordinator

router = APIRouter(tags=["报名"])


@router.post(
    "/courses/{course_id}/requests",
    response_model=EnrollmentRequest,
    status_code=status.HTTP_201_CREATED
)
async def request_enrollment(
    course_id: str,
    user_id: str = Depends(get_current_user_id),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
):
    """学生申请报名免费课程"""
    return await coordinator.request_enrollment(course_id, user_id)


@router.post("/requests/{request_id}/accept", response_model=EnrollmentOutcome)
async def accept_request(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
):
    return await coordinator.accept_request(request_id, user_id)


@router.post("/requests/{request_id}/reject", response_model=EnrollmentOutcome)
async def reject_request(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
):
    return await coordinator.reject_request(request_id, user_id)


@router.delete("/requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_request(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
):
    """学生撤回申请"""
    await coordinator.cancel_request(request_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/courses/{course_id}/checkout", response_model=PurchaseOutcome)
async def checkout(
    course_id: str,
    payment_details: PaymentDetails,
    user_id: str = Depends(get_current_user_id),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
):
    """付费课程支付并报名"""
    return await coordinator.purchase_and_enroll(course_id, user_id, payment_details)


@router.delete("/courses/{course_id}/students/{student_id}", response_model=EnrollmentOutcome)
async def remove_student(
    course_id: str,
    student_id: str,
    user_id: str = Depends(get_current_user_id),
    is_moderator: bool = Depends(get_is_moderator),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
):
    return await coordinator.remove_student(course_id, student_id, user_id, is_moderator=is_moderator)


@router.post("/courses/{course_id}/students/{student_id}/sessions", response_model=MaterializationReport)
async def materialize_sessions(
    course_id: str,
    student_id: str,
    user_id: str = Depends(get_current_user_id),
    is_moderator: bool = Depends(get_is_moderator),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
):
    """重新生成学生缺失的日程"""
    return await coordinator.materialize_sessions(
        course_id,
        student_id,
        actor_id=user_id,
        is_moderator=is_moderator
    )
