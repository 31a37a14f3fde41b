"""
支付服务
选择待支付订单，计算税费/小费/应付金额，完成后将订单置为 Completed 并释放堂食桌台
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..core.exceptions import (
    InsufficientFundsError,
    OrderNotFoundError,
    OrderNotPendingError,
    StorageError,
    ValidationError,
)
from ..core.money import round_money, to_cents
from ..models.order import Order, OrderStatus, OrderType
from ..models.payment import Bill, PaymentMethod, PaymentResult
from .order_service import OrderService, order_service

logger = logging.getLogger(__name__)


class PaymentService:
    """支付处理"""

    def __init__(self, orders: Optional[OrderService] = None):
        self.orders = orders or order_service

    def quote(self, order: Order, tip_amount: float = 0.0) -> Bill:
        """计算账单，小费只在支付时加入"""
        if tip_amount is None:
            tip_amount = 0.0
        if tip_amount < 0:
            raise ValidationError("小费不能为负数", {"tip_amount": tip_amount})
        tip = round_money(tip_amount)
        return Bill(
            order_id=order.id,
            subtotal=order.subtotal,
            tax_amount=order.tax_amount,
            total_amount=order.total_amount,
            tip_amount=tip,
            total_due=round_money(order.total_amount + tip),
        )

    def _get_pending_order(self, user_id: str, order_id: str) -> Order:
        order = self.orders.get_order(user_id, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not order.is_pending:
            raise OrderNotPendingError(order_id, order.status)
        return order

    def quote_order(self, user_id: str, order_id: str, tip_amount: float = 0.0) -> Bill:
        return self.quote(self._get_pending_order(user_id, order_id), tip_amount)

    def process_payment(self, user_id: str, order_id: str, method: PaymentMethod,
                        tip_amount: float = 0.0,
                        amount_paid: Optional[float] = None) -> PaymentResult:
        """
        处理支付

        Args:
            method: card / cash / mobile
            tip_amount: 小费，不小于0
            amount_paid: 现金实收，非现金支付时默认等于应付金额

        Raises:
            OrderNotFoundError: 订单不存在
            OrderNotPendingError: 订单已支付
            InsufficientFundsError: 现金实收少于应付金额，订单状态不变
        """
        method = PaymentMethod(method)
        order = self._get_pending_order(user_id, order_id)
        bill = self.quote(order, tip_amount)

        if amount_paid is None:
            amount_paid = bill.total_due if method != PaymentMethod.CASH else 0.0
        if method == PaymentMethod.CASH and to_cents(amount_paid) < to_cents(bill.total_due):
            raise InsufficientFundsError(amount_paid, bill.total_due)

        processed = self.orders.update_status(
            user_id, order.id, OrderStatus.COMPLETED,
            payment_method=method.value,
            tip_amount=bill.tip_amount,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        if processed is None:
            raise StorageError("订单状态更新失败")

        released_table_id = None
        if processed.order_type == OrderType.DINE_IN and processed.table_id:
            if self.orders.clear_occupied_table(user_id, processed.table_id):
                released_table_id = processed.table_id

        change_due = None
        if method == PaymentMethod.CASH:
            change_due = round_money(amount_paid - bill.total_due)

        logger.info("Order %s paid via %s, total due %.2f", order.id, method.value, bill.total_due)
        return PaymentResult(
            order_id=order.id,
            payment_method=method,
            bill=bill,
            amount_paid=round_money(amount_paid),
            change_due=change_due,
            released_table_id=released_table_id,
        )


# 全局服务实例
payment_service = PaymentService()
