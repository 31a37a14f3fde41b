"""
当前用户上下文
用户身份由前置系统解析，这里只从请求头读取用户标识
"""

from typing import Optional
from fastapi import Header

from .exceptions import MissingUserContextError


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """从 X-User-Id 请求头获取当前用户ID"""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise MissingUserContextError()
    return user_id
