"""
订单管理路由模块
下单走点单状态机，查询和状态更新直接读写订单账本
"""

from typing import Optional

from fastapi import APIRouter, Depends

from ...config.settings import settings
from ...schemas.order import OrderCreateRequest, OrderStatusUpdateRequest
from ...core.context import get_current_user_id
from ...core.error_handler import create_success_response
from ...core.exceptions import OrderNotFoundError, OrderNotPendingError, StorageError
from ...models.order import OrderStatus, OrderType
from ...services.order_composer import OrderComposer
from ...services.order_service import order_service

router = APIRouter()


@router.post("")
def create_order(req: OrderCreateRequest, user_id: str = Depends(get_current_user_id)):
    """
    创建订单

    从菜单选择的条目经点单状态机校验后提交，
    提交时记录原料消耗并登记堂食桌台占用
    """
    composer = OrderComposer(user_id)
    for line in req.items:
        composer.add_dish(line.dish_id, line.quantity)
    composer.set_details(
        order_type=req.order_type,
        table_id=req.table_id,
        customer_name=req.customer_name,
        customer_phone=req.customer_phone,
        customer_address=req.customer_address,
        driver_name=req.driver_name,
        notes=req.notes,
    )
    order = composer.submit()
    return create_success_response(order.to_storage(), "订单已提交")


@router.get("")
def list_orders(status: Optional[OrderStatus] = None,
                user_id: str = Depends(get_current_user_id)):
    """获取订单列表，可按状态过滤"""
    orders = order_service.list_orders(user_id, status.value if status else None)
    return create_success_response([o.to_storage() for o in orders], "查询成功")


@router.get("/pending")
def list_pending_orders(user_id: str = Depends(get_current_user_id)):
    """获取待支付订单"""
    orders = order_service.list_pending(user_id)
    return create_success_response([o.to_storage() for o in orders], "查询成功")


@router.get("/tables")
def list_tables(user_id: str = Depends(get_current_user_id)):
    """获取桌台及占用情况"""
    tables = order_service.list_tables(user_id)
    return create_success_response([t.to_storage() for t in tables], "查询成功")


@router.get("/drivers")
def list_drivers(user_id: str = Depends(get_current_user_id)):
    """获取可选配送员"""
    return create_success_response(list(settings.drivers), "查询成功")


@router.get("/{order_id}")
def get_order(order_id: str, user_id: str = Depends(get_current_user_id)):
    order = order_service.get_order(user_id, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return create_success_response(order.to_storage(), "查询成功")


@router.patch("/{order_id}/status")
def update_order_status(order_id: str, req: OrderStatusUpdateRequest,
                        user_id: str = Depends(get_current_user_id)):
    """
    更新订单状态

    订单只能从 Pending 进入终态，终态订单不能再修改
    """
    order = order_service.get_order(user_id, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    if not order.is_pending:
        raise OrderNotPendingError(order_id, order.status)

    updated = order_service.update_status(user_id, order_id, req.status)
    if updated is None:
        raise StorageError("订单状态更新失败")

    if updated.status == OrderStatus.COMPLETED and updated.order_type == OrderType.DINE_IN:
        order_service.clear_occupied_table(user_id, updated.table_id)
    return create_success_response(updated.to_storage(), "订单状态已更新")
