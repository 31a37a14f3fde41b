"""
支付相关数据模型
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from .base import BaseEntity


class PaymentMethod(str, Enum):
    """支付方式枚举"""
    CARD = "card"
    CASH = "cash"
    MOBILE = "mobile"


class Bill(BaseEntity):
    """账单明细"""
    order_id: str
    subtotal: float
    tax_amount: float
    total_amount: float
    tip_amount: float = 0.0
    total_due: float


class PaymentResult(BaseEntity):
    """支付结果，找零仅用于展示不落库"""
    order_id: str
    payment_method: PaymentMethod
    bill: Bill
    amount_paid: float
    change_due: Optional[float] = Field(None, description="现金找零")
    released_table_id: Optional[str] = Field(None, description="释放的桌台")
