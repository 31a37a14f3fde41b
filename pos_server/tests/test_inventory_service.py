from ..models.inventory import RawIngredient
from ..services.inventory_service import InventoryService
from .conftest import TEST_USER_ID


class TestInventoryService:
    """库存服务测试"""

    def test_add_if_not_exists_is_idempotent(self, test_db):
        """重复加入同名原料不修改已有数量"""
        service = InventoryService()
        first = service.add_if_not_exists(TEST_USER_ID, RawIngredient(name="Flour", quantity=500, unit="g"))
        assert first is not None
        assert first.last_updated is not None

        second = service.add_if_not_exists(TEST_USER_ID, RawIngredient(name="flour ", quantity=9, unit="g"))
        assert second is None

        items = service.list_items(TEST_USER_ID)
        assert len(items) == 1
        assert items[0].quantity == 500

    def test_add_many_reports_skipped(self, sample_inventory):
        service = InventoryService()
        added, skipped = service.add_many_if_not_exists(TEST_USER_ID, [
            RawIngredient(name="Basil", quantity=20, unit="g"),
            RawIngredient(name="DOUGH", quantity=1, unit="pcs"),
        ])
        assert [i.name for i in added] == ["Basil"]
        assert skipped == ["DOUGH"]

    def test_record_usage_decrements(self, sample_inventory):
        service = InventoryService()
        service.record_usage(TEST_USER_ID, "pasta", 240, "g")
        pasta = next(i for i in service.list_items(TEST_USER_ID) if i.name == "Pasta")
        assert pasta.quantity == 760

    def test_record_usage_clamps_at_zero(self, sample_inventory):
        service = InventoryService()
        service.record_usage(TEST_USER_ID, "Mozzarella", 400, "g")
        cheese = next(i for i in service.list_items(TEST_USER_ID) if i.name == "Mozzarella")
        assert cheese.quantity == 0

    def test_record_usage_unknown_item_is_noop(self, sample_inventory):
        service = InventoryService()
        before = [i.to_storage() for i in service.list_items(TEST_USER_ID)]
        service.record_usage(TEST_USER_ID, "Truffle", 5, "g")
        after = [i.to_storage() for i in service.list_items(TEST_USER_ID)]
        assert before == after

    def test_unit_mismatch_is_not_converted(self, sample_inventory):
        service = InventoryService()
        service.record_usage(TEST_USER_ID, "Pasta", 1, "kg")
        pasta = next(i for i in service.list_items(TEST_USER_ID) if i.name == "Pasta")
        assert pasta.quantity == 999

    def test_set_quantity(self, sample_inventory):
        service = InventoryService()
        item = service.set_quantity(TEST_USER_ID, "dough", 25)
        assert item.quantity == 25
        assert service.set_quantity(TEST_USER_ID, "Saffron", 1) is None
