"""
菜单服务
管理每个用户的菜品目录，目录整体以 JSON 保存在 restaurantMenu_<user_id> 键下
"""

import logging
import time
import uuid
from typing import List, Optional, Sequence

from ..config.settings import settings
from ..core.database import DatabaseManager
from ..core.exceptions import StorageError
from ..core.storage import UserCollection, MENU_KEY_BASE
from ..models.menu import Dish, IngredientRequirement
from ..models.ai import GeneratedIngredient

logger = logging.getLogger(__name__)


def generate_dish_id() -> str:
    return f"dish_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


def make_ai_hint(dish_name: str) -> str:
    """取菜名前两个单词作为图片提示词"""
    return " ".join(dish_name.lower().split()[:2])


class MenuService:
    """菜单服务"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.collection = UserCollection(MENU_KEY_BASE, list, db)
        self.db = self.collection.db

    def list_dishes(self, user_id: str) -> List[Dish]:
        """
        获取用户菜单

        新用户会初始化一个空菜单并落盘；读取失败时返回空列表
        """
        if not user_id:
            return []
        try:
            raw = self.collection.load(user_id)
        except StorageError as e:
            logger.error("Failed to load menu for user %s: %s", user_id, e.message)
            return []
        return [Dish.model_validate(item) for item in raw]

    def get_dish(self, user_id: str, dish_id: str) -> Optional[Dish]:
        for dish in self.list_dishes(user_id):
            if dish.id == dish_id:
                return dish
        return None

    def replace_dishes(self, user_id: str, dishes: Sequence[Dish]) -> bool:
        """整体覆盖用户菜单"""
        if not user_id:
            return False
        try:
            self.collection.save(user_id, [dish.to_storage() for dish in dishes])
        except StorageError as e:
            logger.error("Failed to save menu for user %s: %s", user_id, e.message)
            return False
        self.db.write_log(user_id, "menu_replace", {"dish_count": len(dishes)})
        return True

    def add_dish(self, user_id: str, dish_name: str,
                 ingredients: Sequence[GeneratedIngredient]) -> Optional[Dish]:
        """
        将菜品加入菜单，使用默认价格、分类和占位图片

        Args:
            user_id: 当前用户ID
            dish_name: 菜品名称
            ingredients: 生成（或编辑后）的原料清单

        Returns:
            新菜品；缺少用户上下文或保存失败时返回 None
        """
        if not user_id:
            return None

        dish = Dish(
            id=generate_dish_id(),
            name=dish_name,
            price=settings.default_dish_price,
            category=settings.default_dish_category,
            image=settings.placeholder_image,
            ai_hint=make_ai_hint(dish_name),
            ingredients=[
                IngredientRequirement(
                    inventory_item_name=ing.name,
                    quantity_per_dish=ing.quantity,
                    unit=ing.unit,
                )
                for ing in ingredients
            ],
        )
        try:
            self.collection.update(user_id, lambda raw: raw + [dish.to_storage()])
        except StorageError as e:
            logger.error("Failed to add dish %s for user %s: %s", dish_name, user_id, e.message)
            return None

        self.db.write_log(user_id, "menu_add_dish", {"dish_id": dish.id, "name": dish.name})
        return dish


# 全局服务实例
menu_service = MenuService()
