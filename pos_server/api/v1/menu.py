"""
菜单管理路由模块
"""

from fastapi import APIRouter, Depends

from ...schemas.menu import MenuReplaceRequest, AddDishRequest
from ...core.context import get_current_user_id
from ...core.error_handler import create_success_response
from ...core.exceptions import StorageError
from ...services.menu_service import menu_service
from ...services.menu_csv_service import menu_csv_service

router = APIRouter()


@router.get("")
def list_menu(user_id: str = Depends(get_current_user_id)):
    """获取当前用户菜单"""
    dishes = menu_service.list_dishes(user_id)
    return create_success_response([d.to_storage() for d in dishes], "查询成功")


@router.put("")
def replace_menu(req: MenuReplaceRequest, user_id: str = Depends(get_current_user_id)):
    """整体替换菜单"""
    if not menu_service.replace_dishes(user_id, req.dishes):
        raise StorageError("菜单保存失败")
    return create_success_response([d.to_storage() for d in req.dishes], "菜单已更新")


@router.post("/dishes")
def add_dish(req: AddDishRequest, user_id: str = Depends(get_current_user_id)):
    """将菜品加入菜单（默认价格和分类）"""
    dish = menu_service.add_dish(user_id, req.name.strip(), req.ingredients)
    if dish is None:
        raise StorageError(f'"{req.name}" 无法加入菜单')
    return create_success_response(dish.to_storage(), "菜品已加入菜单")


@router.post("/import")
def import_menu(user_id: str = Depends(get_current_user_id)):
    """从菜单CSV导入，整体替换当前菜单"""
    dishes = menu_csv_service.import_menu(user_id)
    return create_success_response([d.to_storage() for d in dishes], "菜单已导入")
