"""
日志管理路由模块
"""

import json

from fastapi import APIRouter, Depends

from ...core.context import get_current_user_id
from ...core.database import db_manager
from ...core.error_handler import create_success_response
from ...schemas.common import LogEntry, LogListResponse, PaginationInfo

router = APIRouter()


@router.get("/logs/my")
def get_my_logs(page: int = 1, size: int = 10,
                user_id: str = Depends(get_current_user_id)):
    """获取当前用户的操作日志"""
    page = max(page, 1)
    size = min(max(size, 1), 100)
    offset = (page - 1) * size

    total = db_manager.count_logs(user_id)
    rows = db_manager.fetch_logs(user_id, size, offset)

    logs = [
        LogEntry(
            log_id=row[0],
            action=row[2],
            detail=json.loads(row[3]) if row[3] else {},
            created_at=str(row[4]),
        )
        for row in rows
    ]
    response = LogListResponse(
        logs=logs,
        pagination=PaginationInfo(
            page=page, size=size, total=total, has_more=offset + len(logs) < total
        ),
    )
    return create_success_response(response.model_dump(), "查询成功")
