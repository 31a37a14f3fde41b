"""
基础数据模型
定义通用的模型基类，存储格式与前端使用的驼峰字段名保持一致
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict


class BaseEntity(BaseModel):
    """基础实体模型，Python 侧蛇形命名，JSON 侧驼峰命名"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_storage(self) -> Dict[str, Any]:
        """转换为可直接 JSON 序列化的字典"""
        return self.model_dump(by_alias=True, mode="json")
