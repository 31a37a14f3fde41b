"""
点单状态机
Building → Validating → Submitted

条目来源有两类：
- 从菜单直接选择（权威来源，菜品一定存在）
- 大模型从通话记录提取的条目（不可信，按名称忽略大小写精确匹配菜单，
  匹配不到的条目只做标记，不会被提交，也不会被造成新菜品）

提交时先尽力记录原料消耗，再写入订单；消耗记录失败不回滚订单
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from ..config.settings import settings
from ..core.exceptions import (
    ComposerStateError,
    DishNotFoundError,
    StorageError,
    ValidationError,
)
from ..core.money import round_money
from ..models.ai import ExtractedOrder, RawSuggestion, SuggestedItem, SuggestionStatus
from ..models.menu import Dish
from ..models.order import NewOrderData, Order, OrderItem, OrderType, ValidatedOrder
from .inventory_service import InventoryService, inventory_service
from .menu_service import MenuService, menu_service
from .order_service import OrderService, order_service, configured_tables

logger = logging.getLogger(__name__)


class ComposerState(str, Enum):
    BUILDING = "Building"
    VALIDATING = "Validating"
    SUBMITTED = "Submitted"


class OrderLine:
    """待提交的一行，持有菜品快照的引用，不修改菜品"""

    def __init__(self, dish: Dish, quantity: int):
        self.dish = dish
        self.quantity = quantity

    def to_order_item(self) -> OrderItem:
        return OrderItem(
            dish_id=self.dish.id,
            name=self.dish.name,
            quantity=self.quantity,
            unit_price=self.dish.price,
            total_price=round_money(self.dish.price * self.quantity),
        )


class OrderComposer:
    """单次点单的状态机，一个实例只提交一次"""

    def __init__(self, user_id: str,
                 menu: Optional[MenuService] = None,
                 inventory: Optional[InventoryService] = None,
                 orders: Optional[OrderService] = None,
                 tax_rate: Optional[float] = None):
        self.user_id = user_id
        self.menu = menu or menu_service
        self.inventory = inventory or inventory_service
        self.orders = orders or order_service
        self.tax_rate = settings.default_tax_rate if tax_rate is None else tax_rate

        self.state = ComposerState.BUILDING
        self.lines: Dict[str, OrderLine] = {}
        self.unmatched: List[SuggestedItem] = []

        self.order_type: Optional[OrderType] = None
        self.table_id: Optional[str] = None
        self.customer_name: Optional[str] = None
        self.customer_phone: Optional[str] = None
        self.customer_address: Optional[str] = None
        self.driver_name: Optional[str] = None
        self.notes: Optional[str] = None

        self._catalog: Optional[List[Dish]] = None

    @property
    def catalog(self) -> List[Dish]:
        if self._catalog is None:
            self._catalog = self.menu.list_dishes(self.user_id)
        return self._catalog

    def _ensure_building(self):
        if self.state != ComposerState.BUILDING:
            raise ComposerStateError(self.state.value)

    # ---- Building ----

    def add_dish(self, dish_id: str, quantity: int = 1) -> OrderLine:
        """从菜单选择菜品，重复选择会累加数量"""
        self._ensure_building()
        if quantity is None or quantity <= 0:
            raise ValidationError("请选择菜品并填写有效数量", {"dish_id": dish_id})

        dish = next((d for d in self.catalog if d.id == dish_id), None)
        if dish is None:
            raise DishNotFoundError(dish_id)
        return self._add_line(dish, quantity)

    def _add_line(self, dish: Dish, quantity: int) -> OrderLine:
        line = self.lines.get(dish.id)
        if line is None:
            line = OrderLine(dish, quantity)
            self.lines[dish.id] = line
        else:
            line.quantity += quantity
        return line

    def remove_item(self, dish_id: str) -> bool:
        self._ensure_building()
        return self.lines.pop(dish_id, None) is not None

    def set_quantity(self, dish_id: str, quantity: int):
        """修改数量，数量不大于0时移除该行"""
        self._ensure_building()
        if dish_id not in self.lines:
            raise DishNotFoundError(dish_id)
        if quantity <= 0:
            self.lines.pop(dish_id)
        else:
            self.lines[dish_id].quantity = quantity

    def match_dish_by_name(self, name: str) -> Optional[Dish]:
        key = (name or "").strip().lower()
        if not key:
            return None
        return next((d for d in self.catalog if d.name.strip().lower() == key), None)

    def apply_suggestion(self, extracted: ExtractedOrder) -> RawSuggestion:
        """
        合并大模型提取的订单

        只预填大模型给出的字段；条目逐个匹配菜单，匹配成功的进入待提交列表
        """
        self._ensure_building()
        suggestion = RawSuggestion(extracted=extracted)

        for raw_item in extracted.items or []:
            dish = self.match_dish_by_name(raw_item.name)
            if dish is None:
                status = SuggestionStatus.UNMATCHED
            elif raw_item.quantity is None or raw_item.quantity < 1:
                status = SuggestionStatus.INVALID_QUANTITY
            else:
                status = SuggestionStatus.MATCHED

            item = SuggestedItem(
                extracted_name=raw_item.name,
                quantity=raw_item.quantity,
                status=status,
                dish=dish,
            )
            suggestion.items.append(item)
            if item.is_usable:
                self._add_line(dish, raw_item.quantity)
            else:
                self.unmatched.append(item)

        if extracted.order_type:
            self.order_type = OrderType(extracted.order_type)
        self.customer_name = extracted.customer_name or self.customer_name
        self.customer_phone = extracted.customer_phone or self.customer_phone
        self.customer_address = extracted.customer_address or self.customer_address
        self.notes = extracted.notes or self.notes

        if self.unmatched:
            logger.info(
                "%d suggested item(s) did not match the menu and will not be submitted",
                len(self.unmatched),
            )
        return suggestion

    def set_details(self, order_type: Optional[OrderType] = None, table_id: Optional[str] = None,
                    customer_name: Optional[str] = None, customer_phone: Optional[str] = None,
                    customer_address: Optional[str] = None, driver_name: Optional[str] = None,
                    notes: Optional[str] = None):
        """由用户确认/修改的订单信息，传入 None 的字段保持原值"""
        self._ensure_building()
        if order_type is not None:
            self.order_type = OrderType(order_type)
        for name, value in (
            ("table_id", table_id),
            ("customer_name", customer_name),
            ("customer_phone", customer_phone),
            ("customer_address", customer_address),
            ("driver_name", driver_name),
            ("notes", notes),
        ):
            if value is not None:
                setattr(self, name, value.strip())

    @property
    def subtotal(self) -> float:
        return round_money(sum(line.dish.price * line.quantity for line in self.lines.values()))

    # ---- Validating ----

    def validate(self) -> ValidatedOrder:
        """
        按订单类型校验必填字段

        Raises:
            ComposerStateError: 已提交后再次校验
            ValidationError: 校验失败，状态回到 Building
        """
        self._ensure_building()
        self.state = ComposerState.VALIDATING
        try:
            return self._build_validated_order()
        finally:
            if self.state == ComposerState.VALIDATING:
                self.state = ComposerState.BUILDING

    def _build_validated_order(self) -> ValidatedOrder:
        if not self.lines:
            raise ValidationError("不能提交空订单")

        details = {"notes": self.notes or None}
        if self.order_type == OrderType.DINE_IN:
            if not self.table_id:
                raise ValidationError("堂食订单请选择桌台", {"missing": ["table_id"]})
            table_name = next(
                (t.name for t in configured_tables() if t.id == self.table_id), "Unknown Table"
            )
            details.update(table=table_name, table_id=self.table_id)
        elif self.order_type == OrderType.DELIVERY:
            self._require("外送订单请填写完整的顾客和配送员信息",
                          customer_name=self.customer_name,
                          customer_phone=self.customer_phone,
                          customer_address=self.customer_address,
                          driver_name=self.driver_name)
            details.update(
                table=f"Delivery to {self.customer_name}",
                customer_name=self.customer_name,
                customer_phone=self.customer_phone,
                customer_address=self.customer_address,
                driver_name=self.driver_name,
            )
        elif self.order_type == OrderType.PICKUP:
            self._require("自取订单请填写顾客姓名和电话",
                          customer_name=self.customer_name,
                          customer_phone=self.customer_phone)
            details.update(
                table=f"Pickup for {self.customer_name}",
                customer_name=self.customer_name,
                customer_phone=self.customer_phone,
            )
        else:
            raise ValidationError("请选择有效的订单类型（堂食、外送或自取）")

        return NewOrderData(
            order_type=self.order_type,
            items=[line.to_order_item() for line in self.lines.values()],
            subtotal=self.subtotal,
            tax_rate=self.tax_rate,
            **details,
        )

    @staticmethod
    def _require(message: str, **fields):
        missing = [name for name, value in fields.items() if not (value or "").strip()]
        if missing:
            raise ValidationError(message, {"missing": missing})

    # ---- Submitted ----

    def submit(self) -> Order:
        """
        校验并提交订单

        Raises:
            ValidationError: 校验失败，未做任何修改
            StorageError: 订单保存失败（已记录的原料消耗不回滚）
        """
        validated = self.validate()
        self.state = ComposerState.VALIDATING

        self._record_ingredient_usage()

        order = self.orders.create_order(self.user_id, validated)
        if order is None:
            self.state = ComposerState.BUILDING
            raise StorageError("订单保存失败，请重试")

        if order.order_type == OrderType.DINE_IN and order.table_id:
            self.orders.set_occupied_table(self.user_id, order.table_id, order.id)

        self.state = ComposerState.SUBMITTED
        return order

    def _record_ingredient_usage(self):
        for line in self.lines.values():
            if line.quantity <= 0:
                continue
            for requirement in line.dish.ingredients:
                if requirement.quantity_per_dish <= 0:
                    continue
                total_consumed = requirement.quantity_per_dish * line.quantity
                self.inventory.record_usage(
                    self.user_id,
                    requirement.inventory_item_name,
                    total_consumed,
                    requirement.unit,
                )
