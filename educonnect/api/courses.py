"""
课程接口
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from educonnect.api.dependencies import (
    get_course_service,
    get_current_user_id,
    get_enrollment_coordinator,
    get_is_moderator
)
from educonnect.core.exceptions import NotCourseOwner
from educonnect.models.course import CourseCreate, CourseUpdate, CourseResponse
from educonnect.models.enrollment import EnrollmentRequest
from educonnect.services.course_service import CourseService
from educonnect.services.enrollment_coordinator import EnrollmentCoordinator

router = APIRouter(prefix="/courses", tags=["课程"])


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    user_id: str = Depends(get_current_user_id),
    service: CourseService = Depends(get_course_service)
):
    """讲师创建课程"""
    course = await service.create_course(user_id, data)
    return CourseResponse.from_course(course)


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(course_id: str, service: CourseService = Depends(get_course_service)):
    course = await service.get_course(course_id)
    return CourseResponse.from_course(course)


@router.patch("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    user_id: str = Depends(get_current_user_id),
    service: CourseService = Depends(get_course_service)
):
    """修改课程基础信息"""
    course = await service.update_course(course_id, user_id, data)
    return CourseResponse.from_course(course)


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    user_id: str = Depends(get_current_user_id),
    is_moderator: bool = Depends(get_is_moderator),
    coordinator: EnrollmentCoordinator = Depends(get_enrollment_coordinator)
) -> Dict[str, Any]:
    """删除课程（讲师或管理员），级联删除日程、申请和学习进度"""
    return await coordinator.delete_course(course_id, user_id, is_moderator=is_moderator)


@router.get("/{course_id}/requests", response_model=List[EnrollmentRequest])
async def list_pending_requests(
    course_id: str,
    user_id: str = Depends(get_current_user_id),
    is_moderator: bool = Depends(get_is_moderator),
    service: CourseService = Depends(get_course_service)
):
    """课程待处理的报名申请"""
    course = await service.get_course(course_id)
    if course.instructor_id != user_id and not is_moderator:
        raise NotCourseOwner(course_id, user_id)
    return await service.list_pending_requests(course_id)
