"""
领域数据模型
"""

from .menu import Dish, IngredientRequirement
from .inventory import InventoryItem, RawIngredient
from .order import (
    Order, OrderItem, OrderDetails, OrderStatus, OrderType,
    NewOrderData, ValidatedOrder, Table,
)
from .payment import Bill, PaymentMethod, PaymentResult
from .ai import (
    ExtractedOrder, ExtractedOrderItem, GeneratedIngredient, IngredientsList,
    RawSuggestion, SuggestedItem, SuggestionStatus,
)

__all__ = [
    "Dish", "IngredientRequirement",
    "InventoryItem", "RawIngredient",
    "Order", "OrderItem", "OrderDetails", "OrderStatus", "OrderType",
    "NewOrderData", "ValidatedOrder", "Table",
    "Bill", "PaymentMethod", "PaymentResult",
    "ExtractedOrder", "ExtractedOrderItem", "GeneratedIngredient", "IngredientsList",
    "RawSuggestion", "SuggestedItem", "SuggestionStatus",
]
