"""
大模型输入输出模型
大模型返回的数据均视为不可信输入，需经点单状态机确认后才能落库
"""

from pydantic import Field, field_validator
from typing import Optional, List
from enum import Enum
from .base import BaseEntity
from .menu import Dish
from .order import OrderType


class GeneratedIngredient(BaseEntity):
    """生成的原料"""
    name: str = Field(..., description="原料名称")
    quantity: float = Field(..., description="数量")
    unit: str = Field(..., description="单位，如 g、ml、pcs、kg")


class IngredientsList(BaseEntity):
    """原料清单生成结果"""
    ingredients: List[GeneratedIngredient] = Field(..., description="原料列表")


class ExtractedOrderItem(BaseEntity):
    """
    单个提取条目

    名称缺失的条目保留下来，匹配时标记为 unmatched；
    数量为 null 视为 1，无法解释为整数的数量记为 None，匹配时标记为 invalid_quantity
    """
    name: Optional[str] = Field(None, description="顾客说出的菜品名称")
    quantity: Optional[int] = Field(1, description="数量")

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v):
        if v is None:
            return None
        name = str(v).strip()
        return name or None

    @field_validator("quantity", mode="before")
    @classmethod
    def normalize_quantity(cls, v):
        if v is None:
            return 1
        try:
            number = float(v)
        except (TypeError, ValueError):
            return None
        return int(number) if number.is_integer() else None


class ExtractedOrder(BaseEntity):
    """从通话记录中提取的订单，所有字段都可能缺失"""
    order_type: Optional[OrderType] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    items: Optional[List[ExtractedOrderItem]] = None
    notes: Optional[str] = None
    confidence_score: Optional[float] = Field(None, ge=0, le=1)

    @field_validator("items", mode="before")
    @classmethod
    def normalize_items(cls, v):
        """条目可能是裸字符串或对象，其他形状的条目直接丢弃"""
        if v is None:
            return None
        if not isinstance(v, list):
            return []
        items = []
        for raw in v:
            if isinstance(raw, str):
                items.append({"name": raw})
            elif isinstance(raw, (dict, ExtractedOrderItem)):
                items.append(raw)
        return items

    @field_validator("order_type", mode="before")
    @classmethod
    def normalize_order_type(cls, v):
        """无法识别的订单类型视为缺失"""
        if v is None:
            return None
        value = str(v).strip().lower().replace("_", "-").replace(" ", "-")
        if value == "dinein":
            value = OrderType.DINE_IN.value
        valid = {t.value for t in OrderType}
        return value if value in valid else None


class SuggestionStatus(str, Enum):
    """大模型条目与菜单的匹配结果"""
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    INVALID_QUANTITY = "invalid_quantity"


class SuggestedItem(BaseEntity):
    extracted_name: Optional[str] = None
    quantity: Optional[int] = None
    status: SuggestionStatus
    dish: Optional[Dish] = None

    @property
    def is_usable(self) -> bool:
        return self.status == SuggestionStatus.MATCHED and self.dish is not None


class RawSuggestion(BaseEntity):
    """未经确认的大模型建议，不能直接提交"""
    extracted: ExtractedOrder
    items: List[SuggestedItem] = Field(default_factory=list)

    @property
    def unmatched(self) -> List[SuggestedItem]:
        return [item for item in self.items if not item.is_usable]
