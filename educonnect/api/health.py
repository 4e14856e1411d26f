from fastapi import APIRouter, HTTPException
import logging

from educonnect.core.config import settings
from educonnect.core.redis import redis_manager
from educonnect.core.database import database_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["健康检查"])


@router.get("")
async def health_check():
    """基础健康检查接口"""
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


@router.get("/database")
async def database_health():
    """数据库与缓存连接健康检查"""
    health_status = {
        "postgresql": False,
        "redis": False,
        "overall": False,
        "details": {}
    }

    try:
        db_status = await database_service.health_check()
        health_status["postgresql"] = db_status["status"] == "healthy"
        health_status["details"]["postgresql"] = db_status["message"]

        if redis_manager.redis_pool:
            health_status["redis"] = await redis_manager.ping()
            health_status["details"]["redis"] = "连接正常" if health_status["redis"] else "连接失败"
        else:
            health_status["details"]["redis"] = "连接池未初始化"

        # Redis只用于缓存，不影响整体可用性
        health_status["overall"] = health_status["postgresql"]

        if not health_status["overall"]:
            logger.warning(f"数据库连接检查失败: {health_status['details']}")
        return health_status

    except Exception as e:
        logger.error(f"数据库健康检查异常: {str(e)}")
        raise HTTPException(
            status_code=503,
            detail={
                "error": "数据库连接失败",
                "message": str(e),
                "status": health_status
            }
        )
