"""
菜单相关的请求模式
"""

from pydantic import Field
from typing import List
from ..models.base import BaseEntity
from ..models.menu import Dish
from ..models.ai import GeneratedIngredient


class MenuReplaceRequest(BaseEntity):
    """整体替换菜单"""
    dishes: List[Dish] = Field(..., description="完整菜品列表")


class AddDishRequest(BaseEntity):
    """将生成的菜品加入菜单"""
    name: str = Field(..., min_length=1, description="菜品名称")
    ingredients: List[GeneratedIngredient] = Field(default_factory=list, description="原料清单")


class MenuUploadRequest(BaseEntity):
    """上传菜单文件"""
    file: str = Field(..., description="base64 编码的文件内容")
    user_id: str = Field(..., min_length=1, description="用户ID")
