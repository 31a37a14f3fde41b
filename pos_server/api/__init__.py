"""
API routes and endpoints.
"""

from fastapi import APIRouter
from .v1 import ai, inventory, logs, menu, menu_csv, orders, payments

api_router = APIRouter()

# 菜单CSV接口沿用前端约定的路径，无版本前缀（/api/menuCsv、/api/uploadMenu）
api_router.include_router(menu_csv.router, prefix="", tags=["菜单CSV"])

api_router.include_router(menu.router, prefix="/v1/menu", tags=["菜单"])
api_router.include_router(inventory.router, prefix="/v1/inventory", tags=["库存"])
api_router.include_router(orders.router, prefix="/v1/orders", tags=["订单"])
api_router.include_router(payments.router, prefix="/v1/payments", tags=["支付"])
api_router.include_router(ai.router, prefix="/v1/ai", tags=["大模型"])
api_router.include_router(logs.router, prefix="/v1", tags=["日志"])
