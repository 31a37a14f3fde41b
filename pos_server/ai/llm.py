"""
大模型客户端
使用 Groq 托管模型，延迟到首次调用时创建，未配置 API Key 时调用直接失败
"""

from functools import lru_cache

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_groq import ChatGroq

from ..config.settings import settings
from ..core.exceptions import AIAdapterError


@lru_cache(maxsize=1)
def get_chat_model() -> BaseChatModel:
    if not settings.groq_api_key:
        raise AIAdapterError("未配置 GROQ_API_KEY，无法调用大模型")
    return ChatGroq(
        temperature=settings.llm_temperature,
        groq_api_key=settings.groq_api_key,
        model_name=settings.llm_model_name,
    )
