"""
大模型相关的请求模式
"""

from pydantic import Field
from ..models.base import BaseEntity
from ..models.ai import ExtractedOrder
from .order import OrderDetailsRequest


class GenerateIngredientsRequest(BaseEntity):
    dish_name: str = Field(..., min_length=1, description="菜品名称")
    number_of_servings: int = Field(1, ge=1, description="份数")


class ExtractOrderRequest(BaseEntity):
    transcript: str = Field(..., min_length=1, description="通话记录")


class ConfirmSuggestedOrderRequest(OrderDetailsRequest):
    """确认大模型提取的订单，用户填写的字段优先"""
    extracted: ExtractedOrder = Field(..., description="大模型提取结果")
