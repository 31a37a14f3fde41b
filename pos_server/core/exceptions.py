"""
自定义异常类
提供更精确的错误处理和异常信息
"""

from typing import Any, Dict, Optional


class BaseApplicationError(Exception):
    """应用基础异常类"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class StorageError(BaseApplicationError):
    """存储读写异常（序列化失败、数据库不可用等）"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "STORAGE_ERROR", details)


class ValidationError(BaseApplicationError):
    """数据验证异常"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class MissingUserContextError(BaseApplicationError):
    """缺少当前用户上下文"""

    def __init__(self):
        super().__init__("未提供用户标识", "USER_CONTEXT_REQUIRED")


class BusinessLogicError(BaseApplicationError):
    """业务逻辑异常"""
    pass


class DishNotFoundError(BusinessLogicError):
    """菜品不存在"""

    def __init__(self, dish_id: str):
        super().__init__("菜品不存在", "DISH_NOT_FOUND", {"dish_id": dish_id})


class OrderNotFoundError(BusinessLogicError):
    """订单不存在"""

    def __init__(self, order_id: str):
        super().__init__("订单不存在", "ORDER_NOT_FOUND", {"order_id": order_id})


class OrderNotPendingError(BusinessLogicError):
    """订单不在待支付状态"""

    def __init__(self, order_id: str, status: str):
        super().__init__(
            f"订单状态为{status}，无法支付",
            "ORDER_NOT_PENDING",
            {"order_id": order_id, "status": status},
        )


class InsufficientFundsError(BusinessLogicError):
    """现金不足"""

    def __init__(self, amount_paid: float, total_due: float):
        super().__init__(
            f"实收现金 {amount_paid:.2f} 少于应付金额 {total_due:.2f}",
            "INSUFFICIENT_FUNDS",
            {"amount_paid": amount_paid, "total_due": total_due},
        )


class ComposerStateError(BusinessLogicError):
    """点单状态机状态错误"""

    def __init__(self, state: str):
        super().__init__(
            f"当前状态 {state} 不允许修改订单",
            "COMPOSER_STATE_INVALID",
            {"state": state},
        )


class MenuCsvNotFoundError(BaseApplicationError):
    """菜单CSV文件不存在"""

    def __init__(self, path: Optional[str] = None):
        super().__init__("Menu CSV not found", "MENU_CSV_NOT_FOUND", {"path": path})


class AIAdapterError(BaseApplicationError):
    """大模型调用失败或返回结构不合法"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "AI_ADAPTER_ERROR", details)
