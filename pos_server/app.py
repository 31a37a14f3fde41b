"""
Webmeister360AI 餐厅收银后端服务 - 主应用入口

主要功能模块：
- 菜单管理与菜单CSV上传/导入
- 点单（菜单选择，或由大模型从通话记录提取后确认）
- 支付、找零与堂食桌台释放
- 原料库存消耗记录
- 操作日志

技术栈：FastAPI + DuckDB + LangChain(Groq)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .config.settings import settings
from .core.database import db_manager
from .core.error_handler import (
    application_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .core.events import Event, MENU_IMPORTED, event_bus
from .core.exceptions import BaseApplicationError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)

APP_DESCRIPTION = "Webmeister360AI 餐厅收银系统API"


def log_menu_imported(event: Event):
    """菜单导入后通知：当前只记录日志，打开的点单会在下次读取菜单时拿到新数据"""
    logger.info(
        "Menu imported for user %s (%s dishes), event %s",
        event.payload.get("user_id"), event.payload.get("dish_count"), event.event_id,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    try:
        db_manager.init_database()
        logger.info("Database ready at %s", db_manager.db_path)
    except Exception as e:
        # 启动不因数据库失败而中断，首次访问时会重试建连
        logger.error("Database initialization failed: %s", e)

    event_bus.subscribe(MENU_IMPORTED, log_menu_imported)
    yield
    event_bus.unsubscribe(MENU_IMPORTED, log_menu_imported)
    db_manager.close()


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)


def create_app() -> FastAPI:
    """创建FastAPI应用"""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=APP_DESCRIPTION,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        status = {"version": settings.api_version, "llmConfigured": bool(settings.groq_api_key)}
        try:
            db_manager.get_connection()
        except Exception as e:
            return dict(status, status="unhealthy", database=f"error: {e}")
        return dict(status, status="healthy", database="connected")

    @app.get("/")
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": APP_DESCRIPTION,
        }

    return app


app = create_app()
