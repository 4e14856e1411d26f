"""
讲师接口：收入汇总与收款账户
"""

from fastapi import APIRouter, Depends

from educonnect.api.dependencies import get_current_user_id, get_instructor_service
from educonnect.models.instructor import EarningsSummary, PayoutAccountSetup, PayoutAccountStatus
from educonnect.services.instructor_service import InstructorService

router = APIRouter(prefix="/instructors", tags=["讲师"])


@router.get("/me/earnings", response_model=EarningsSummary)
async def get_my_earnings(
    user_id: str = Depends(get_current_user_id),
    service: InstructorService = Depends(get_instructor_service)
):
    """当前讲师的收入汇总"""
    return await service.get_earnings(user_id)


@router.put("/me/payout-account", response_model=PayoutAccountStatus)
async def setup_payout_account(
    data: PayoutAccountSetup,
    user_id: str = Depends(get_current_user_id),
    service: InstructorService = Depends(get_instructor_service)
):
    """保存或创建收款账户，完成后付费课程即可收款"""
    return await service.setup_payout_account(user_id, data.account_id)
