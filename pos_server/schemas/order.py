"""
订单相关的请求模式
"""

from pydantic import Field
from typing import List, Optional
from ..models.base import BaseEntity
from ..models.order import OrderStatus, OrderType


class OrderLineRequest(BaseEntity):
    dish_id: str = Field(..., description="菜品ID")
    quantity: int = Field(1, description="数量")


class OrderDetailsRequest(BaseEntity):
    """用户确认的订单信息"""
    order_type: Optional[OrderType] = Field(None, description="订单类型")
    table_id: Optional[str] = Field(None, description="桌台ID")
    customer_name: Optional[str] = Field(None, description="顾客姓名")
    customer_phone: Optional[str] = Field(None, description="顾客电话")
    customer_address: Optional[str] = Field(None, description="配送地址")
    driver_name: Optional[str] = Field(None, description="配送员")
    notes: Optional[str] = Field(None, description="备注")


class OrderCreateRequest(OrderDetailsRequest):
    """从菜单选择菜品下单"""
    items: List[OrderLineRequest] = Field(default_factory=list, description="订单条目")


class OrderStatusUpdateRequest(BaseEntity):
    status: OrderStatus = Field(..., description="新状态")
