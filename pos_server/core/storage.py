"""
按用户划分的集合存储
每个集合在键值表中占一个键：<base>_<user_id>，值为整个集合的 JSON
"""

from typing import Any, Callable, Optional

from .database import DatabaseManager, db_manager


MENU_KEY_BASE = "restaurantMenu"
INVENTORY_KEY_BASE = "restaurantInventory"
ORDERS_KEY_BASE = "restaurantOrders"
OCCUPIED_TABLES_KEY_BASE = "restaurantOccupiedTables"


class UserCollection:
    """单个集合的读-改-写仓库"""

    def __init__(self, key_base: str, empty_factory: Callable[[], Any] = list,
                 db: Optional[DatabaseManager] = None):
        self.key_base = key_base
        self.empty_factory = empty_factory
        self.db = db or db_manager

    def key_for(self, user_id: str) -> str:
        return f"{self.key_base}_{user_id}"

    def load(self, user_id: str) -> Any:
        """读取集合；新用户初始化为空集合并落盘"""
        key = self.key_for(user_id)
        value = self.db.get_json(key)
        if value is None:
            value = self.empty_factory()
            self.db.put_json(key, value)
        return value

    def save(self, user_id: str, value: Any) -> None:
        self.db.put_json(self.key_for(user_id), value)

    def update(self, user_id: str, mutate: Callable[[Any], Any]) -> Any:
        """
        原子地 读取-修改-写回

        mutate 接收当前集合，返回要写回的新集合；返回 None 表示不修改
        """
        with self.db.locked():
            value = mutate(self.load(user_id))
            if value is not None:
                self.save(user_id, value)
            return value
