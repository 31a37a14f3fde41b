"""
应用日志配置
控制台输出使用文本格式，debug 模式下额外输出 JSON 结构化日志
"""

import json
import logging
from datetime import datetime, timezone

from ..config.settings import settings


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = None, structured: bool = None):
    """初始化根日志器，重复调用时替换已有处理器"""
    level_name = (level or settings.log_level).upper()
    use_json = settings.debug if structured is None else structured

    root_logger = logging.getLogger()
    root_logger.setLevel(level_name)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    if use_json:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
    root_logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger(__name__).info("Logging initialized at %s", level_name)
