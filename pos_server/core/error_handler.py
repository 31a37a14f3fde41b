"""
统一错误处理模块
所有接口的失败响应都是 {success: false, error_code, message, details}

错误分类：
- 输入校验（VALIDATION_ERROR / 请求体校验）: 400 / 422
- 资源不存在（菜品、订单、库存原料、菜单CSV）: 404
- 业务规则（订单非待支付、点单状态错误）: 409
- 大模型调用失败: 502
- 存储失败与未知异常: 500，未知异常额外写入 system_error 操作日志
"""

import logging
import traceback
from typing import Dict, Any, List, Optional

from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .exceptions import BaseApplicationError
from .database import db_manager

logger = logging.getLogger(__name__)


class ErrorResponse:
    """标准错误响应格式"""

    def __init__(self, error_code: str, message: str,
                 details: Optional[Dict[str, Any]] = None,
                 http_status: int = 400):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.http_status = http_status

    def to_json_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.http_status,
            content={
                "success": False,
                "error_code": self.error_code,
                "message": self.message,
                "details": self.details,
            },
        )


def _describe(request: Request) -> str:
    return f"{request.method} {request.url.path}"


def _summarize_validation_errors(error: RequestValidationError) -> List[Dict[str, Any]]:
    """只保留字段路径和原因，输入值可能包含顾客信息"""
    return [
        {"field": ".".join(str(part) for part in item.get("loc", ())), "reason": item.get("msg")}
        for item in error.errors()
    ]


class ErrorHandler:
    """全局错误处理器"""

    ERROR_CODE_STATUS_MAP = {
        "VALIDATION_ERROR": 400,
        "USER_CONTEXT_REQUIRED": 401,
        "INTERNAL_ERROR": 500,
        "STORAGE_ERROR": 500,

        # 菜单与库存
        "DISH_NOT_FOUND": 404,
        "INVENTORY_ITEM_NOT_FOUND": 404,
        "MENU_CSV_NOT_FOUND": 404,

        # 点单与订单
        "ORDER_NOT_FOUND": 404,
        "ORDER_NOT_PENDING": 409,
        "COMPOSER_STATE_INVALID": 409,

        # 支付
        "INSUFFICIENT_FUNDS": 400,

        # 大模型
        "AI_ADAPTER_ERROR": 502,
    }

    @classmethod
    def status_for(cls, error_code: str) -> int:
        return cls.ERROR_CODE_STATUS_MAP.get(error_code, 400)

    @classmethod
    def handle_application_error(cls, error: BaseApplicationError,
                                 context: str = "") -> ErrorResponse:
        http_status = cls.status_for(error.error_code)
        level = logging.ERROR if http_status >= 500 else logging.INFO
        logger.log(level, "%s failed with %s: %s", context, error.error_code, error.message)

        return ErrorResponse(
            error_code=error.error_code,
            message=error.message,
            details=error.details,
            http_status=http_status,
        )

    @classmethod
    def handle_validation_error(cls, error: RequestValidationError) -> ErrorResponse:
        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="请求参数验证失败",
            details={"fields": _summarize_validation_errors(error)},
            http_status=422,
        )

    @classmethod
    def handle_unknown_error(cls, error: Exception, request: Request) -> ErrorResponse:
        """未知异常：写应用日志和 system_error 操作日志，响应中不带堆栈"""
        logger.exception("Unhandled error on %s", _describe(request))
        db_manager.write_log(request.headers.get("x-user-id"), "system_error", {
            "path": request.url.path,
            "method": request.method,
            "type": type(error).__name__,
            "message": str(error),
            "traceback": traceback.format_exc(),
        })

        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="系统内部错误",
            details={"error_type": type(error).__name__},
            http_status=500,
        )


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    return ErrorHandler.handle_application_error(exc, _describe(request)).to_json_response()


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return ErrorResponse(
        error_code="HTTP_ERROR",
        message=str(exc.detail),
        http_status=exc.status_code,
    ).to_json_response()


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return ErrorHandler.handle_validation_error(exc).to_json_response()


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return ErrorHandler.handle_unknown_error(exc, request).to_json_response()


def create_success_response(data: Any = None, message: str = "操作成功") -> Dict[str, Any]:
    """创建标准成功响应"""
    response = {"success": True, "message": message}
    if data is not None:
        response["data"] = data
    return response
