import pytest

from ..core.exceptions import (
    InsufficientFundsError,
    OrderNotFoundError,
    OrderNotPendingError,
    ValidationError,
)
from ..models.order import OrderStatus, OrderType
from ..models.payment import PaymentMethod
from ..services.order_composer import OrderComposer
from ..services.order_service import order_service
from ..services.payment_service import PaymentService
from .conftest import TEST_USER_ID


@pytest.fixture
def pizza_order(sample_menu):
    """堂食 2 份披萨，总额 25.92"""
    composer = OrderComposer(TEST_USER_ID, tax_rate=0.08)
    composer.add_dish("dish_pizza", 2)
    composer.set_details(order_type=OrderType.DINE_IN, table_id="t5")
    return composer.submit()


class TestPaymentService:
    """支付服务测试"""

    def test_quote_includes_tip(self, pizza_order):
        bill = PaymentService().quote_order(TEST_USER_ID, pizza_order.id, 3.005)
        assert bill.total_amount == 25.92
        assert bill.tip_amount == 3.01
        assert bill.total_due == 28.93

    def test_negative_tip_rejected(self, pizza_order):
        with pytest.raises(ValidationError):
            PaymentService().quote_order(TEST_USER_ID, pizza_order.id, -1)

    def test_cash_insufficient_keeps_order_pending(self, pizza_order):
        service = PaymentService()
        with pytest.raises(InsufficientFundsError):
            service.process_payment(TEST_USER_ID, pizza_order.id, PaymentMethod.CASH, amount_paid=20.00)

        order = order_service.get_order(TEST_USER_ID, pizza_order.id)
        assert order.status == OrderStatus.PENDING
        assert order_service.get_occupied_tables(TEST_USER_ID) == {"t5": pizza_order.id}

    def test_cash_without_amount_rejected(self, pizza_order):
        with pytest.raises(InsufficientFundsError):
            PaymentService().process_payment(TEST_USER_ID, pizza_order.id, "cash")

    def test_cash_payment_returns_change(self, pizza_order):
        """实收 30.00，找零 4.08，订单完成并释放桌台"""
        result = PaymentService().process_payment(
            TEST_USER_ID, pizza_order.id, PaymentMethod.CASH, amount_paid=30.00
        )

        assert result.bill.total_due == 25.92
        assert result.change_due == 4.08
        assert result.released_table_id == "t5"

        order = order_service.get_order(TEST_USER_ID, pizza_order.id)
        assert order.status == OrderStatus.COMPLETED
        assert order.payment_method == "cash"
        assert order.completed_at is not None
        assert order_service.get_occupied_tables(TEST_USER_ID) == {}
        assert order_service.list_pending(TEST_USER_ID) == []

    def test_exact_cash_accepted(self, pizza_order):
        result = PaymentService().process_payment(
            TEST_USER_ID, pizza_order.id, PaymentMethod.CASH, amount_paid=25.92
        )
        assert result.change_due == 0.0

    def test_card_payment_with_tip(self, pizza_order):
        result = PaymentService().process_payment(
            TEST_USER_ID, pizza_order.id, PaymentMethod.CARD, tip_amount=4
        )
        assert result.change_due is None
        assert result.amount_paid == 29.92
        order = order_service.get_order(TEST_USER_ID, pizza_order.id)
        assert order.tip_amount == 4.0
        # 订单总额不含小费
        assert order.total_amount == 25.92

    def test_completed_order_cannot_be_paid_twice(self, pizza_order):
        service = PaymentService()
        service.process_payment(TEST_USER_ID, pizza_order.id, PaymentMethod.MOBILE)
        with pytest.raises(OrderNotPendingError):
            service.process_payment(TEST_USER_ID, pizza_order.id, PaymentMethod.MOBILE)

    def test_unknown_order(self, sample_menu):
        with pytest.raises(OrderNotFoundError):
            PaymentService().process_payment(TEST_USER_ID, "order_missing", PaymentMethod.CARD)
