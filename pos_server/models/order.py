"""
订单相关数据模型
"""

from pydantic import Field
from typing import Optional, List
from enum import Enum
from .base import BaseEntity


class OrderType(str, Enum):
    """订单类型枚举"""
    DINE_IN = "dine-in"      # 堂食
    DELIVERY = "delivery"    # 外送
    PICKUP = "pickup"        # 自取


class OrderStatus(str, Enum):
    """订单状态枚举"""
    PENDING = "Pending"        # 待支付
    COMPLETED = "Completed"    # 已支付


TERMINAL_STATUSES = {OrderStatus.COMPLETED.value}


class OrderItem(BaseEntity):
    """订单条目，下单时菜品数据的快照"""
    dish_id: str = Field(..., description="菜品ID")
    name: str = Field(..., description="菜品名称")
    quantity: int = Field(..., ge=1, description="数量")
    unit_price: float = Field(..., ge=0, description="单价")
    total_price: float = Field(..., ge=0, description="小计")


class OrderDetails(BaseEntity):
    """订单的桌台/顾客信息"""
    table: Optional[str] = Field(None, description="桌台显示名称")
    table_id: Optional[str] = Field(None, description="桌台ID（仅堂食）")
    customer_name: Optional[str] = Field(None, description="顾客姓名")
    customer_phone: Optional[str] = Field(None, description="顾客电话")
    customer_address: Optional[str] = Field(None, description="配送地址")
    driver_name: Optional[str] = Field(None, description="配送员")
    notes: Optional[str] = Field(None, description="备注")


class NewOrderData(OrderDetails):
    """通过校验、待写入订单库的订单数据"""
    order_type: OrderType = Field(..., description="订单类型")
    items: List[OrderItem] = Field(..., min_length=1, description="订单条目")
    subtotal: float = Field(..., ge=0, description="小计")
    tax_rate: float = Field(..., ge=0, description="税率")


# 点单状态机只向订单库交付校验后的订单
ValidatedOrder = NewOrderData


class Order(NewOrderData):
    """订单完整模型"""
    id: str = Field(..., description="订单ID")
    tax_amount: float = Field(..., description="税额")
    total_amount: float = Field(..., description="总额（不含小费）")
    status: OrderStatus = Field(OrderStatus.PENDING, description="订单状态")
    created_at: str = Field(..., description="创建时间")
    completed_at: Optional[str] = Field(None, description="支付完成时间")
    payment_method: Optional[str] = Field(None, description="支付方式")
    tip_amount: Optional[float] = Field(None, description="小费")

    @property
    def is_pending(self) -> bool:
        return self.status not in TERMINAL_STATUSES


class Table(BaseEntity):
    """餐桌"""
    id: str = Field(..., description="桌台ID")
    name: str = Field(..., description="桌台名称")
    occupied_by_order_id: Optional[str] = Field(None, description="占用订单ID")
