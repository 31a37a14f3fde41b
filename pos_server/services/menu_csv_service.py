"""
菜单CSV服务
提供菜单CSV解析、上传和导入功能

CSV 固定列：id,name,price,category,image,aiHint,ingredients
ingredients 列以分号分隔，每项为 "原料名" 或 "原料名:每份数量:单位"

主要功能：
- 解析CSV并修复可修复的行（缺列补默认值、缺ID自动生成）
- 跳过无法修复的行（列数过多、缺菜名、价格非法）
- 上传：base64 解码后解析、规范化并写回配置路径
- 导入：用CSV整体替换用户菜单，并发布 menu-imported 事件
"""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ..config.settings import settings
from ..core.events import EventBus, MENU_IMPORTED, event_bus
from ..core.exceptions import MenuCsvNotFoundError, StorageError, ValidationError
from ..models.menu import Dish, IngredientRequirement
from .menu_service import MenuService, generate_dish_id, make_ai_hint, menu_service

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["id", "name", "price", "category", "image", "aiHint", "ingredients"]


class CsvParseResult:
    """CSV解析结果"""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.skipped_rows: int = 0
        self.repaired_rows: int = 0

    @property
    def partial_or_repaired(self) -> bool:
        return self.skipped_rows > 0 or self.repaired_rows > 0

    def to_frame(self) -> pd.DataFrame:
        records = [dict(row, ingredients=";".join(row["ingredients"])) for row in self.rows]
        return pd.DataFrame(records, columns=CSV_COLUMNS)


def parse_ingredient_entry(entry: str) -> IngredientRequirement:
    """解析 "名称" 或 "名称:数量:单位"，数量缺失或非法时为 0（不扣库存）"""
    parts = [p.strip() for p in entry.split(":")]
    quantity = 0.0
    if len(parts) > 1 and parts[1]:
        try:
            quantity = float(parts[1])
        except ValueError:
            quantity = 0.0
    return IngredientRequirement(
        inventory_item_name=parts[0],
        quantity_per_dish=quantity,
        unit=parts[2] if len(parts) > 2 else "",
    )


class MenuCsvService:
    """菜单CSV服务"""

    def __init__(self, menu: Optional[MenuService] = None,
                 bus: Optional[EventBus] = None,
                 csv_path: Optional[str] = None):
        self.menu = menu or menu_service
        self.bus = bus or event_bus
        self._csv_path = csv_path

    @property
    def csv_path(self) -> Path:
        return Path(self._csv_path or settings.menu_csv_path)

    def parse_csv_text(self, text: str) -> CsvParseResult:
        result = CsvParseResult()
        if not text.strip():
            return result

        def on_bad_line(fields: List[str]):
            result.skipped_rows += 1
            logger.warning("Skipping malformed menu row: %s", ",".join(fields))
            return None

        frame = pd.read_csv(
            io.StringIO(text.strip()),
            header=0,
            names=CSV_COLUMNS,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=on_bad_line,
        ).fillna("")

        for record in frame.to_dict(orient="records"):
            row = self._normalize_row(record)
            if row is None:
                result.skipped_rows += 1
            else:
                result.rows.append(row)
                if row.pop("_repaired"):
                    result.repaired_rows += 1
        return result

    def _normalize_row(self, record: Dict[str, str]) -> Optional[Dict[str, Any]]:
        values = {column: str(record.get(column, "")).strip() for column in CSV_COLUMNS}
        if not values["name"]:
            return None
        try:
            price = float(values["price"])
        except ValueError:
            logger.warning("Skipping menu row %s: invalid price %r", values["name"], values["price"])
            return None
        if price < 0:
            return None

        repaired = False
        if not values["id"]:
            values["id"] = generate_dish_id()
            repaired = True
        if not values["category"]:
            values["category"] = settings.default_dish_category
            repaired = True
        if not values["image"]:
            values["image"] = settings.placeholder_image
            repaired = True
        if not values["aiHint"]:
            values["aiHint"] = make_ai_hint(values["name"])
            repaired = True

        return {
            "id": values["id"],
            "name": values["name"],
            "price": price,
            "category": values["category"],
            "image": values["image"],
            "aiHint": values["aiHint"],
            "ingredients": [i.strip() for i in values["ingredients"].split(";") if i.strip()],
            "_repaired": repaired,
        }

    def read_menu_csv(self) -> List[Dict[str, Any]]:
        """读取配置路径下的菜单CSV"""
        path = self.csv_path
        if not path.exists():
            raise MenuCsvNotFoundError(str(path))
        return self.parse_csv_text(path.read_text(encoding="utf-8-sig")).rows

    def handle_upload(self, file_b64: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        处理菜单上传

        Returns:
            dict: shouldImport 表示是否有可导入的菜品；
                  partialOrRepaired 表示有行被跳过或修复
        """
        try:
            content = base64.b64decode(file_b64, validate=True)
            text = content.decode("utf-8-sig")
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"无法解析上传的文件: {e}")

        result = self.parse_csv_text(text)
        if result.rows:
            path = self.csv_path
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                result.to_frame().to_csv(path, index=False)
            except OSError as e:
                raise StorageError(f"保存菜单CSV失败: {e}")

        logger.info(
            "Menu upload by %s: %d rows, %d skipped, %d repaired",
            user_id, len(result.rows), result.skipped_rows, result.repaired_rows,
        )
        return {
            "shouldImport": bool(result.rows),
            "partialOrRepaired": result.partial_or_repaired,
            "rowCount": len(result.rows),
            "skippedRows": result.skipped_rows,
        }

    def import_menu(self, user_id: str) -> List[Dish]:
        """用CSV整体替换用户菜单，并通知订阅方重新读取菜单"""
        dishes = [
            Dish(
                id=row["id"],
                name=row["name"],
                price=row["price"],
                category=row["category"],
                image=row["image"],
                ai_hint=row["aiHint"],
                ingredients=[parse_ingredient_entry(entry) for entry in row["ingredients"]],
            )
            for row in self.read_menu_csv()
        ]
        if not self.menu.replace_dishes(user_id, dishes):
            raise StorageError("菜单保存失败")

        self.bus.publish(MENU_IMPORTED, user_id=user_id, dish_count=len(dishes))
        return dishes


# 全局服务实例
menu_csv_service = MenuCsvService()
