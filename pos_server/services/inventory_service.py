"""
库存服务
库存只作参考，不阻塞下单：消耗记录找不到原料时静默跳过，存储失败只记日志
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from ..core.database import DatabaseManager
from ..core.exceptions import StorageError
from ..core.storage import UserCollection, INVENTORY_KEY_BASE
from ..models.inventory import InventoryItem, RawIngredient

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InventoryService:
    """库存服务"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.collection = UserCollection(INVENTORY_KEY_BASE, list, db)
        self.db = self.collection.db

    def list_items(self, user_id: str) -> List[InventoryItem]:
        if not user_id:
            return []
        try:
            return self._load(user_id)
        except StorageError as e:
            logger.error("Failed to load inventory for user %s: %s", user_id, e.message)
            return []

    def _load(self, user_id: str) -> List[InventoryItem]:
        return [InventoryItem.model_validate(item) for item in self.collection.load(user_id)]

    def _save(self, user_id: str, items: Sequence[InventoryItem]):
        self.collection.save(user_id, [item.to_storage() for item in items])

    def _find(self, items: Sequence[InventoryItem], name: str) -> Optional[InventoryItem]:
        for item in items:
            if item.matches(name):
                return item
        return None

    def add_if_not_exists(self, user_id: str, raw: RawIngredient) -> Optional[InventoryItem]:
        """
        原料不存在时加入库存

        Returns:
            新建的库存条目；原料已存在（不做任何修改）或保存失败时返回 None
        """
        if not user_id:
            return None

        item = InventoryItem(
            name=raw.name.strip(),
            quantity=raw.quantity,
            unit=raw.unit,
            last_updated=_now_iso(),
        )
        try:
            with self.db.locked():
                items = self._load(user_id)
                if self._find(items, raw.name) is not None:
                    return None
                self._save(user_id, items + [item])
        except StorageError as e:
            logger.error("Failed to add inventory item %s: %s", raw.name, e.message)
            return None

        self.db.write_log(user_id, "inventory_add", item.to_storage())
        return item

    def add_many_if_not_exists(self, user_id: str,
                               raws: Sequence[RawIngredient]) -> Tuple[List[InventoryItem], List[str]]:
        """批量加入生成的原料，返回 (新增条目, 已存在而跳过的名称)"""
        added, skipped = [], []
        for raw in raws:
            item = self.add_if_not_exists(user_id, raw)
            if item is not None:
                added.append(item)
            else:
                skipped.append(raw.name)
        return added, skipped

    def record_usage(self, user_id: str, item_name: str, consumed: float, unit: str = ""):
        """
        记录原料消耗

        原料不存在时不做任何事；数量最低扣到 0；单位不一致时不做换算
        """
        if not user_id:
            return
        try:
            with self.db.locked():
                parsed = self._load(user_id)
                item = self._find(parsed, item_name)
                if item is None:
                    logger.debug("Inventory item %s not tracked for user %s", item_name, user_id)
                    return

                if unit and item.unit and unit.strip().lower() != item.unit.strip().lower():
                    logger.warning(
                        "Unit mismatch for %s: recorded %s, consumed %s", item.name, item.unit, unit
                    )

                before = item.quantity
                item.quantity = max(0.0, before - consumed)
                item.last_updated = _now_iso()
                if before < consumed:
                    logger.warning("Inventory for %s dropped below zero, clamped", item.name)
                self._save(user_id, parsed)
        except StorageError as e:
            logger.error("Failed to record usage of %s: %s", item_name, e.message)
            return

        self.db.write_log(user_id, "inventory_usage", {
            "name": item.name,
            "consumed": consumed,
            "unit": unit,
            "quantity_before": before,
            "quantity_after": item.quantity,
        })

    def set_quantity(self, user_id: str, item_name: str, quantity: float) -> Optional[InventoryItem]:
        """手工盘点/补货，原料不存在时返回 None"""
        if not user_id:
            return None
        try:
            with self.db.locked():
                items = self._load(user_id)
                item = self._find(items, item_name)
                if item is None:
                    return None
                item.quantity = quantity
                item.last_updated = _now_iso()
                self._save(user_id, items)
        except StorageError as e:
            logger.error("Failed to update inventory item %s: %s", item_name, e.message)
            return None

        self.db.write_log(user_id, "inventory_set", item.to_storage())
        return item


# 全局服务实例
inventory_service = InventoryService()
