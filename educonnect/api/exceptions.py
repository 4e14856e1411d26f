"""
API异常处理器
业务异常按类型映射状态码，响应体统一为 {"error", "message", "details"}
"""

import logging

from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from educonnect.core.exceptions import BusinessException

logger = logging.getLogger(__name__)

__all__ = [
    "BusinessException",
    "business_exception_handler",
    "validation_exception_handler",
    "http_exception_handler",
    "database_exception_handler",
    "general_exception_handler"
]


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """业务异常"""
    if exc.status_code >= 500:
        logger.error(f"业务异常 {request.method} {request.url.path}: {exc.code} {exc.details}")
    else:
        logger.info(f"业务异常 {request.method} {request.url.path}: {exc.code}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求参数校验失败"""
    return JSONResponse(
        status_code=422,
        content={
            "error": "request_validation_error",
            "message": "Requête invalide",
            "details": {"errors": jsonable_errors(exc)}
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "message": str(exc.detail), "details": {}}
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """数据库异常"""
    logger.error(f"数据库异常 {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "database_error", "message": "Erreur de base de données", "details": {}}
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """未预期异常"""
    logger.exception(f"未处理异常 {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": "Une erreur inattendue s'est produite", "details": {}}
    )
