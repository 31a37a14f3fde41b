"""
库存相关数据模型
"""

from pydantic import Field
from typing import Optional
from .base import BaseEntity


class RawIngredient(BaseEntity):
    """待加入库存的原料（通常来自大模型生成）"""
    name: str = Field(..., min_length=1, description="原料名称")
    quantity: float = Field(..., ge=0, description="数量")
    unit: str = Field("", description="单位")


class InventoryItem(BaseEntity):
    """库存条目"""
    name: str = Field(..., description="原料名称")
    quantity: float = Field(..., description="现有数量")
    unit: str = Field("", description="单位")
    last_updated: Optional[str] = Field(None, description="最后更新时间")

    def matches(self, name: str) -> bool:
        """名称匹配，忽略大小写和首尾空格"""
        return self.name.strip().lower() == name.strip().lower()
