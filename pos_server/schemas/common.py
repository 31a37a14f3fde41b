from typing import List
from pydantic import BaseModel, Field


class PaginationInfo(BaseModel):
    """分页信息"""
    page: int = Field(description="页码")
    size: int = Field(description="每页数量")
    total: int = Field(description="总记录数")
    has_more: bool = Field(description="是否有更多数据")


class LogEntry(BaseModel):
    """操作日志条目"""
    log_id: int
    action: str
    detail: dict
    created_at: str


class LogListResponse(BaseModel):
    logs: List[LogEntry] = Field(description="日志列表")
    pagination: PaginationInfo = Field(description="分页信息")
