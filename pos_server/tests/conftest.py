"""
测试配置文件
提供测试所需的fixtures和配置
"""

import importlib

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models import FakeListChatModel

from ..app import create_app
from ..core.database import db_manager
from ..models.menu import Dish, IngredientRequirement
from ..services.inventory_service import inventory_service
from ..services.menu_csv_service import menu_csv_service
from ..services.menu_service import menu_service
from ..models.inventory import RawIngredient

TEST_USER_ID = "user_test_001"
OTHER_USER_ID = "user_test_002"

FLOW_MODULES = [
    "pos_server.ai.flows.generate_ingredients_list",
    "pos_server.ai.flows.extract_order_from_text",
]


@pytest.fixture(autouse=True)
def test_db():
    """每个测试使用独立的内存数据库"""
    db_manager.reconfigure(":memory:")
    yield db_manager
    db_manager.close()


@pytest.fixture
def menu_csv_path(tmp_path, monkeypatch):
    """菜单CSV写到临时目录"""
    path = tmp_path / "download" / "menu.csv"
    monkeypatch.setattr(menu_csv_service, "_csv_path", str(path))
    return path


@pytest.fixture
def sample_menu(test_db):
    """示例菜单"""
    dishes = [
        Dish(
            id="dish_pizza",
            name="Pizza",
            price=12.00,
            category="Mains",
            image="https://placehold.co/100x100.png",
            ai_hint="pizza",
            ingredients=[
                IngredientRequirement(inventory_item_name="Dough", quantity_per_dish=1, unit="pcs"),
                IngredientRequirement(inventory_item_name="Mozzarella", quantity_per_dish=100, unit="g"),
            ],
        ),
        Dish(
            id="dish_spaghetti",
            name="Spaghetti",
            price=9.50,
            category="Mains",
            ai_hint="spaghetti",
            ingredients=[
                IngredientRequirement(inventory_item_name="Pasta", quantity_per_dish=120, unit="g"),
            ],
        ),
        Dish(id="dish_tiramisu", name="Tiramisu", price=6.25, category="Desserts"),
    ]
    assert menu_service.replace_dishes(TEST_USER_ID, dishes)
    return dishes


@pytest.fixture
def sample_inventory(test_db):
    """示例库存"""
    added, _ = inventory_service.add_many_if_not_exists(TEST_USER_ID, [
        RawIngredient(name="Dough", quantity=10, unit="pcs"),
        RawIngredient(name="Mozzarella", quantity=150, unit="g"),
        RawIngredient(name="Pasta", quantity=1000, unit="g"),
    ])
    return added


@pytest.fixture
def fake_llm(monkeypatch):
    """用固定回复替换 Groq 模型"""
    def install(*responses):
        model = FakeListChatModel(responses=list(responses))
        for module_name in FLOW_MODULES:
            monkeypatch.setattr(importlib.import_module(module_name), "get_chat_model", lambda: model)
        return model
    return install


@pytest.fixture
def app_instance(test_db):
    """测试应用"""
    return create_app()


@pytest.fixture
def client(app_instance):
    """测试客户端"""
    return TestClient(app_instance)


@pytest.fixture
def auth_headers():
    return {"X-User-Id": TEST_USER_ID}
