"""
库存管理路由模块
"""

from fastapi import APIRouter, Depends

from ...schemas.inventory import (
    AddGeneratedIngredientsRequest,
    RecordUsageRequest,
    SetQuantityRequest,
)
from ...core.context import get_current_user_id
from ...core.error_handler import create_success_response
from ...core.exceptions import BusinessLogicError
from ...services.inventory_service import inventory_service

router = APIRouter()


@router.get("")
def list_inventory(user_id: str = Depends(get_current_user_id)):
    """获取库存"""
    items = inventory_service.list_items(user_id)
    return create_success_response([i.to_storage() for i in items], "查询成功")


@router.post("/generated")
def add_generated_ingredients(req: AddGeneratedIngredientsRequest,
                              user_id: str = Depends(get_current_user_id)):
    """将生成的原料加入库存，已存在的原料不会被覆盖"""
    added, skipped = inventory_service.add_many_if_not_exists(user_id, req.ingredients)
    if added:
        message = f"新增 {len(added)} 项原料，{len(skipped)} 项已存在未修改"
    else:
        message = "所有原料均已存在，库存未修改"
    return create_success_response({
        "added": [i.to_storage() for i in added],
        "skipped": skipped,
    }, message)


@router.post("/usage")
def record_usage(req: RecordUsageRequest, user_id: str = Depends(get_current_user_id)):
    """记录原料消耗（原料不存在时忽略）"""
    inventory_service.record_usage(user_id, req.item_name, req.consumed_quantity, req.unit)
    return create_success_response(message="已记录")


@router.put("/{item_name}")
def set_quantity(item_name: str, req: SetQuantityRequest,
                 user_id: str = Depends(get_current_user_id)):
    """盘点/补货"""
    item = inventory_service.set_quantity(user_id, item_name, req.quantity)
    if item is None:
        raise BusinessLogicError("库存中没有该原料", "INVENTORY_ITEM_NOT_FOUND",
                                 {"name": item_name})
    return create_success_response(item.to_storage(), "库存已更新")
