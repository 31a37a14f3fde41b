"""
订单服务模块
管理每个用户的订单账本和餐桌占用

主要功能：
- 订单创建（生成ID、时间戳、税额与总额）
- 待支付订单查询
- 订单状态更新
- 餐桌占用登记与释放

业务规则：
- 订单只会从 Pending 变为 Completed，不会被删除
- 订单条目是下单时的菜品快照，之后改价不影响已有订单
- 餐桌占用只作展示参考，不作为权威状态
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..config.settings import settings
from ..core.database import DatabaseManager
from ..core.exceptions import StorageError
from ..core.money import round_money
from ..core.storage import UserCollection, ORDERS_KEY_BASE, OCCUPIED_TABLES_KEY_BASE
from ..models.order import NewOrderData, Order, OrderStatus, Table

logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    return f"order_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


def configured_tables() -> List[Table]:
    return [Table(id=f"t{i}", name=f"Table {i}") for i in range(1, settings.table_count + 1)]


class OrderService:
    """订单服务类，封装所有订单相关的业务逻辑"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.orders = UserCollection(ORDERS_KEY_BASE, list, db)
        self.occupancy = UserCollection(OCCUPIED_TABLES_KEY_BASE, dict, db)
        self.db = self.orders.db

    def _load_orders(self, user_id: str) -> List[Order]:
        return [Order.model_validate(item) for item in self.orders.load(user_id)]

    def _save_orders(self, user_id: str, orders: List[Order]):
        self.orders.save(user_id, [order.to_storage() for order in orders])

    def create_order(self, user_id: str, order_data: NewOrderData) -> Optional[Order]:
        """
        创建新订单

        Args:
            user_id: 当前用户ID
            order_data: 经过点单状态机校验的订单数据

        Returns:
            Order: 状态为 Pending 的新订单；缺少用户或保存失败时返回 None
        """
        if not user_id:
            return None

        subtotal = round_money(order_data.subtotal)
        tax_amount = round_money(subtotal * order_data.tax_rate)
        order = Order(
            **order_data.model_dump(exclude={"subtotal"}),
            subtotal=subtotal,
            id=generate_order_id(),
            tax_amount=tax_amount,
            total_amount=round_money(subtotal + tax_amount),
            status=OrderStatus.PENDING,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

        try:
            self.orders.update(user_id, lambda raw: raw + [order.to_storage()])
        except StorageError as e:
            logger.error("Failed to create order for user %s: %s", user_id, e.message)
            return None

        self.db.write_log(user_id, "order_create", {
            "order_id": order.id,
            "order_type": order.order_type,
            "item_count": len(order.items),
            "total_amount": order.total_amount,
        })
        logger.info("Order %s created for user %s, total %.2f", order.id, user_id, order.total_amount)
        return order

    def list_orders(self, user_id: str, status: Optional[str] = None) -> List[Order]:
        if not user_id:
            return []
        try:
            orders = self._load_orders(user_id)
        except StorageError as e:
            logger.error("Failed to load orders for user %s: %s", user_id, e.message)
            return []
        if status:
            orders = [order for order in orders if order.status == status]
        return orders

    def list_pending(self, user_id: str) -> List[Order]:
        """获取所有未进入终态的订单，按创建顺序"""
        return [order for order in self.list_orders(user_id) if order.is_pending]

    def get_order(self, user_id: str, order_id: str) -> Optional[Order]:
        for order in self.list_orders(user_id):
            if order.id == order_id:
                return order
        return None

    def update_status(self, user_id: str, order_id: str, status: OrderStatus,
                      **fields) -> Optional[Order]:
        """
        更新订单状态（单一可变字段，不保留历史）

        Args:
            fields: 同时写入的附加字段，如支付方式、小费、完成时间

        Returns:
            更新后的订单；订单不存在或保存失败时返回 None
        """
        if not user_id:
            return None
        try:
            with self.db.locked():
                orders = self._load_orders(user_id)
                target = next((order for order in orders if order.id == order_id), None)
                if target is None:
                    return None

                previous = target.status
                target.status = status
                for name, value in fields.items():
                    setattr(target, name, value)
                self._save_orders(user_id, orders)
        except StorageError as e:
            logger.error("Failed to update order %s: %s", order_id, e.message)
            return None

        self.db.write_log(user_id, "order_status", {
            "order_id": order_id,
            "from": previous,
            "to": target.status,
        })
        return target

    def get_occupied_tables(self, user_id: str) -> Dict[str, str]:
        if not user_id:
            return {}
        try:
            return dict(self.occupancy.load(user_id))
        except StorageError as e:
            logger.error("Failed to load table occupancy for user %s: %s", user_id, e.message)
            return {}

    def set_occupied_table(self, user_id: str, table_id: str, order_id: str) -> bool:
        if not user_id or not table_id:
            return False

        def occupy(occupied):
            occupied[table_id] = order_id
            return occupied

        try:
            self.occupancy.update(user_id, occupy)
        except StorageError as e:
            logger.error("Failed to occupy table %s: %s", table_id, e.message)
            return False
        return True

    def clear_occupied_table(self, user_id: str, table_id: str) -> bool:
        if not user_id or not table_id:
            return False

        def release(occupied):
            # 桌台未被占用时不写回
            return occupied if occupied.pop(table_id, None) is not None else None

        try:
            return self.occupancy.update(user_id, release) is not None
        except StorageError as e:
            logger.error("Failed to release table %s: %s", table_id, e.message)
            return False

    def list_tables(self, user_id: str) -> List[Table]:
        """配置的餐桌及其占用情况"""
        occupied = self.get_occupied_tables(user_id)
        tables = configured_tables()
        for table in tables:
            table.occupied_by_order_id = occupied.get(table.id)
        return tables


# 全局服务实例
order_service = OrderService()
