from concurrent.futures import ThreadPoolExecutor

from ..models.ai import GeneratedIngredient
from ..models.inventory import RawIngredient
from ..models.order import NewOrderData, OrderItem, OrderType
from ..services.inventory_service import InventoryService
from ..services.menu_service import MenuService
from ..services.order_service import OrderService
from .conftest import TEST_USER_ID

THREADS = 8
CALLS_PER_THREAD = 10


def _pickup_order():
    return NewOrderData(
        order_type=OrderType.PICKUP,
        items=[OrderItem(dish_id="dish_pizza", name="Pizza", quantity=1,
                         unit_price=12.00, total_price=12.00)],
        subtotal=12.00,
        tax_rate=0.08,
        table="Pickup for Ann",
        customer_name="Ann",
        customer_phone="555",
    )


def _run_concurrently(fn):
    with ThreadPoolExecutor(max_workers=THREADS) as pool:
        futures = [pool.submit(fn, i) for i in range(THREADS * CALLS_PER_THREAD)]
        return [f.result() for f in futures]


class TestConcurrentWrites:
    """并发请求下的 读取-修改-写回 不丢数据"""

    def test_concurrent_order_creation_keeps_every_order(self, test_db):
        service = OrderService()
        created = _run_concurrently(lambda i: service.create_order(TEST_USER_ID, _pickup_order()))

        assert all(order is not None for order in created)
        stored_ids = {order.id for order in service.list_orders(TEST_USER_ID)}
        assert stored_ids == {order.id for order in created}
        assert len(stored_ids) == THREADS * CALLS_PER_THREAD

    def test_concurrent_usage_decrements_exactly(self, test_db):
        service = InventoryService()
        service.add_if_not_exists(TEST_USER_ID, RawIngredient(name="Flour", quantity=1000, unit="g"))

        _run_concurrently(lambda i: service.record_usage(TEST_USER_ID, "Flour", 1, "g"))

        flour = service.list_items(TEST_USER_ID)[0]
        assert flour.quantity == 1000 - THREADS * CALLS_PER_THREAD

    def test_concurrent_table_occupancy(self, test_db):
        service = OrderService()
        _run_concurrently(lambda i: service.set_occupied_table(TEST_USER_ID, f"t{i}", f"order_{i}"))
        assert len(service.get_occupied_tables(TEST_USER_ID)) == THREADS * CALLS_PER_THREAD

    def test_concurrent_add_if_not_exists_adds_once(self, test_db):
        service = InventoryService()
        results = _run_concurrently(
            lambda i: service.add_if_not_exists(TEST_USER_ID, RawIngredient(name="Salt", quantity=i, unit="g"))
        )
        assert len([item for item in results if item is not None]) == 1
        assert len(service.list_items(TEST_USER_ID)) == 1

    def test_concurrent_add_dish(self, test_db):
        service = MenuService()
        _run_concurrently(lambda i: service.add_dish(
            TEST_USER_ID, f"Dish {i}", [GeneratedIngredient(name="Salt", quantity=1, unit="g")]
        ))
        assert len(service.list_dishes(TEST_USER_ID)) == THREADS * CALLS_PER_THREAD
