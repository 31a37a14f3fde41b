"""
支付相关的请求模式
"""

from pydantic import Field
from typing import Optional
from ..models.base import BaseEntity
from ..models.payment import PaymentMethod


class PaymentQuoteRequest(BaseEntity):
    order_id: str = Field(..., description="订单ID")
    tip_amount: float = Field(0.0, ge=0, description="小费")


class PaymentRequest(PaymentQuoteRequest):
    payment_method: PaymentMethod = Field(..., description="支付方式")
    amount_paid: Optional[float] = Field(None, ge=0, description="现金实收")
