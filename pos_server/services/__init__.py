"""
Business logic services.
Contains service layer implementations for the POS core operations.
"""

from .menu_service import MenuService, menu_service
from .inventory_service import InventoryService, inventory_service
from .order_service import OrderService, order_service
from .order_composer import OrderComposer, ComposerState
from .payment_service import PaymentService, payment_service
from .menu_csv_service import MenuCsvService, menu_csv_service

__all__ = [
    "MenuService",
    "InventoryService",
    "OrderService",
    "OrderComposer",
    "ComposerState",
    "PaymentService",
    "MenuCsvService",
    "menu_service",
    "inventory_service",
    "order_service",
    "payment_service",
    "menu_csv_service",
]
