"""
菜单相关数据模型
"""

from pydantic import Field
from typing import List
from .base import BaseEntity


class IngredientRequirement(BaseEntity):
    """每份菜品消耗的库存原料（按名称弱引用库存）"""
    inventory_item_name: str = Field(..., description="库存原料名称")
    quantity_per_dish: float = Field(..., description="每份消耗数量")
    unit: str = Field("", description="单位")


class Dish(BaseEntity):
    """菜品"""
    id: str = Field(..., description="菜品ID")
    name: str = Field(..., description="菜品名称")
    price: float = Field(..., ge=0, description="价格")
    category: str = Field("", description="分类")
    image: str = Field("", description="图片URL")
    ai_hint: str = Field("", description="图片提示词")
    ingredients: List[IngredientRequirement] = Field(default_factory=list, description="原料需求")
