"""
库存相关的请求模式
"""

from pydantic import Field
from typing import List
from ..models.base import BaseEntity
from ..models.inventory import RawIngredient


class AddGeneratedIngredientsRequest(BaseEntity):
    """将生成的原料加入库存（已存在的不修改）"""
    ingredients: List[RawIngredient] = Field(..., min_length=1, description="原料列表")


class RecordUsageRequest(BaseEntity):
    """记录原料消耗"""
    item_name: str = Field(..., min_length=1, description="原料名称")
    consumed_quantity: float = Field(..., gt=0, description="消耗数量")
    unit: str = Field("", description="单位")


class SetQuantityRequest(BaseEntity):
    """盘点/补货"""
    quantity: float = Field(..., ge=0, description="现有数量")
