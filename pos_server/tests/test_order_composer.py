import pytest

from ..core.exceptions import ComposerStateError, DishNotFoundError, StorageError, ValidationError
from ..models.ai import ExtractedOrder, ExtractedOrderItem, SuggestionStatus
from ..models.order import OrderStatus, OrderType
from ..services.inventory_service import inventory_service
from ..services.menu_service import menu_service
from ..services.order_composer import ComposerState, OrderComposer
from ..services.order_service import order_service
from .conftest import TEST_USER_ID


def _inventory_quantity(name):
    return next(i.quantity for i in inventory_service.list_items(TEST_USER_ID) if i.name == name)


class TestOrderComposer:
    """点单状态机测试"""

    def test_pizza_dine_in_totals(self, sample_menu):
        """2 份 12.00 的披萨，税率 8%"""
        composer = OrderComposer(TEST_USER_ID, tax_rate=0.08)
        composer.add_dish("dish_pizza", 2)
        composer.set_details(order_type=OrderType.DINE_IN, table_id="t3")

        order = composer.submit()

        assert order.subtotal == 24.00
        assert order.tax_amount == 1.92
        assert order.total_amount == 25.92
        assert order.status == OrderStatus.PENDING
        assert order.table == "Table 3"
        assert order.items[0].unit_price == 12.00
        assert order.items[0].total_price == 24.00
        assert composer.state == ComposerState.SUBMITTED

    def test_submit_marks_table_occupied(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_spaghetti")
        composer.set_details(order_type="dine-in", table_id="t1")
        order = composer.submit()

        assert order_service.get_occupied_tables(TEST_USER_ID) == {"t1": order.id}
        table = next(t for t in order_service.list_tables(TEST_USER_ID) if t.id == "t1")
        assert table.occupied_by_order_id == order.id

    def test_repeated_dish_merges_lines(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.add_dish("dish_pizza", 2)
        assert len(composer.lines) == 1
        assert composer.lines["dish_pizza"].quantity == 3
        assert composer.subtotal == 36.00

    def test_set_quantity_and_remove(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.add_dish("dish_tiramisu")
        composer.set_quantity("dish_pizza", 4)
        assert composer.subtotal == 54.25
        composer.set_quantity("dish_pizza", 0)
        assert "dish_pizza" not in composer.lines
        assert composer.remove_item("dish_tiramisu") is True
        assert composer.remove_item("dish_tiramisu") is False

    def test_invalid_quantity_rejected(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        with pytest.raises(ValidationError):
            composer.add_dish("dish_pizza", 0)
        with pytest.raises(DishNotFoundError):
            composer.add_dish("dish_missing")

    def test_empty_order_rejected(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.set_details(order_type=OrderType.PICKUP, customer_name="Ann", customer_phone="555")
        with pytest.raises(ValidationError):
            composer.submit()
        assert composer.state == ComposerState.BUILDING
        assert order_service.list_orders(TEST_USER_ID) == []

    DELIVERY_DETAILS = {
        "customer_name": "Jane Doe",
        "customer_phone": "555-1234",
        "customer_address": "1 Main St",
        "driver_name": "Mike",
    }

    @pytest.mark.parametrize("blank", ["", "   "])
    @pytest.mark.parametrize("missing_field", list(DELIVERY_DETAILS))
    def test_delivery_requires_every_customer_field(self, sample_menu, missing_field, blank):
        """外送缺少任一顾客/配送员信息时不创建订单，状态回到 Building"""
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.set_details(order_type=OrderType.DELIVERY,
                             **dict(self.DELIVERY_DETAILS, **{missing_field: blank}))

        with pytest.raises(ValidationError) as exc_info:
            composer.submit()
        assert exc_info.value.details["missing"] == [missing_field]
        assert composer.state == ComposerState.BUILDING
        assert order_service.list_orders(TEST_USER_ID) == []

    def test_delivery_with_all_fields(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.set_details(order_type=OrderType.DELIVERY, **self.DELIVERY_DETAILS)

        order = composer.submit()
        assert order.table == "Delivery to Jane Doe"
        assert order.driver_name == "Mike"
        assert order.table_id is None
        assert order_service.get_occupied_tables(TEST_USER_ID) == {}

    def test_order_items_are_snapshots(self, sample_menu):
        """下单后修改菜品价格，已有订单的单价和金额不变"""
        composer = OrderComposer(TEST_USER_ID, tax_rate=0.08)
        composer.add_dish("dish_pizza", 2)
        composer.set_details(order_type=OrderType.DINE_IN, table_id="t1")
        order = composer.submit()

        repriced = [dish.model_copy(update={"price": 99.00, "name": dish.name + " XL"})
                    for dish in sample_menu]
        assert menu_service.replace_dishes(TEST_USER_ID, repriced)

        stored = order_service.get_order(TEST_USER_ID, order.id)
        assert stored.items[0].unit_price == 12.00
        assert stored.items[0].total_price == 24.00
        assert stored.items[0].name == "Pizza"
        assert stored.subtotal == 24.00
        assert stored.total_amount == 25.92

    def test_dine_in_requires_table(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.set_details(order_type=OrderType.DINE_IN)
        with pytest.raises(ValidationError):
            composer.validate()

    def test_unknown_table_label(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.set_details(order_type=OrderType.DINE_IN, table_id="patio")
        assert composer.validate().table == "Unknown Table"

    def test_missing_order_type_rejected(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        with pytest.raises(ValidationError):
            composer.validate()

    def test_pickup_label(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_tiramisu")
        composer.set_details(order_type=OrderType.PICKUP, customer_name="Ann", customer_phone="555")
        assert composer.submit().table == "Pickup for Ann"

    def test_submit_records_ingredient_usage(self, sample_menu, sample_inventory):
        """库存不足时扣到 0，订单照常提交"""
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza", 2)
        composer.set_details(order_type=OrderType.DINE_IN, table_id="t2")
        composer.submit()

        assert _inventory_quantity("Dough") == 8
        assert _inventory_quantity("Mozzarella") == 0
        assert _inventory_quantity("Pasta") == 1000

    def test_submitted_composer_is_frozen(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.set_details(order_type=OrderType.DINE_IN, table_id="t1")
        composer.submit()
        with pytest.raises(ComposerStateError):
            composer.add_dish("dish_pizza")
        with pytest.raises(ComposerStateError):
            composer.submit()
        assert len(order_service.list_orders(TEST_USER_ID)) == 1


class TestSuggestedOrders:
    """大模型建议的合并"""

    def _extracted(self, **overrides):
        data = {
            "order_type": "delivery",
            "customer_name": "Jane Doe",
            "customer_phone": "555-1234",
            "customer_address": "1 Main St",
            "items": [
                ExtractedOrderItem(name="spaghetti", quantity=2),
                ExtractedOrderItem(name="Unicorn Steak", quantity=1),
            ],
        }
        data.update(overrides)
        return ExtractedOrder(**data)

    def test_case_insensitive_match_and_unmatched_flag(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        suggestion = composer.apply_suggestion(self._extracted())

        statuses = {item.extracted_name: item.status for item in suggestion.items}
        assert statuses == {
            "spaghetti": SuggestionStatus.MATCHED,
            "Unicorn Steak": SuggestionStatus.UNMATCHED,
        }
        assert suggestion.items[0].dish.name == "Spaghetti"
        assert [i.extracted_name for i in suggestion.unmatched] == ["Unicorn Steak"]
        assert list(composer.lines) == ["dish_spaghetti"]
        assert composer.order_type == OrderType.DELIVERY
        assert composer.customer_name == "Jane Doe"

    def test_unmatched_items_never_submitted(self, sample_menu):
        """用户确认后也只提交匹配到菜单的条目"""
        composer = OrderComposer(TEST_USER_ID)
        composer.apply_suggestion(self._extracted())
        composer.set_details(driver_name="Mike")
        order = composer.submit()

        assert [item.name for item in order.items] == ["Spaghetti"]
        assert order.items[0].quantity == 2
        assert order.subtotal == 19.00
        menu_names = [d.name for d in composer.menu.list_dishes(TEST_USER_ID)]
        assert len(menu_names) == 3
        assert "Unicorn Steak" not in menu_names

    def test_invalid_quantity_flagged(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        suggestion = composer.apply_suggestion(self._extracted(
            items=[ExtractedOrderItem(name="Pizza", quantity=0)]
        ))
        assert suggestion.items[0].status == SuggestionStatus.INVALID_QUANTITY
        assert composer.lines == {}

    def test_incomplete_items_flagged_not_submitted(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        suggestion = composer.apply_suggestion(ExtractedOrder.model_validate({
            "orderType": "pickup",
            "items": [
                {"name": "Pizza", "quantity": 2},
                {"name": "Tiramisu", "quantity": 1.5},
                {"name": None, "quantity": 1},
            ],
        }))

        assert [item.status for item in suggestion.items] == [
            SuggestionStatus.MATCHED,
            SuggestionStatus.INVALID_QUANTITY,
            SuggestionStatus.UNMATCHED,
        ]
        assert list(composer.lines) == ["dish_pizza"]
        assert composer.lines["dish_pizza"].quantity == 2

    def test_user_details_override_missing_fields(self, sample_menu):
        composer = OrderComposer(TEST_USER_ID)
        composer.apply_suggestion(self._extracted(order_type=None, customer_phone=None))
        assert composer.order_type is None
        composer.set_details(order_type=OrderType.PICKUP, customer_phone="555-0000")
        order = composer.submit()
        assert order.order_type == OrderType.PICKUP
        assert order.customer_phone == "555-0000"


class TestBestEffortSubmission:
    """原料消耗与订单写入不在同一事务中"""

    def test_usage_kept_when_order_save_fails(self, sample_menu, sample_inventory, monkeypatch):
        composer = OrderComposer(TEST_USER_ID)
        composer.add_dish("dish_pizza")
        composer.set_details(order_type=OrderType.DINE_IN, table_id="t1")
        monkeypatch.setattr(composer.orders, "create_order", lambda user_id, order_data: None)

        with pytest.raises(StorageError):
            composer.submit()

        assert composer.state == ComposerState.BUILDING
        assert _inventory_quantity("Dough") == 9
        assert order_service.get_occupied_tables(TEST_USER_ID) == {}
