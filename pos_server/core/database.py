"""
数据库连接和管理模块
基于 DuckDB 的按用户键值存储，每个集合整体以 JSON 序列化保存在一个键下

数据表说明：
- kv_store: 键值集合（菜单、库存、订单、餐桌占用）
- logs: 操作日志
"""

import duckdb
import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional, Generator
from contextlib import contextmanager

from .exceptions import StorageError
from ..config.settings import settings

logger = logging.getLogger(__name__)

SCHEMA_SQL = r"""
CREATE TABLE IF NOT EXISTS kv_store (
  key TEXT PRIMARY KEY,
  value_json TEXT NOT NULL,
  updated_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  user_id TEXT,
  action TEXT,
  detail_json TEXT,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_user ON logs(user_id);
CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""


def _db_path_from_url(db_url: str) -> str:
    """从 duckdb:// URL 中解析数据库路径"""
    if db_url.startswith("duckdb://"):
        return db_url.replace("duckdb://", "", 1)
    return db_url


class DatabaseManager:
    """数据库管理器，封装键值读写和操作日志"""

    def __init__(self, db_path: Optional[str] = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self.db_path = db_path or _db_path_from_url(settings.database_url)

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接，首次访问时建表"""
        if self._connection is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = duckdb.connect(self.db_path)
            self._init_schema()
        return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self.connection

    def _init_schema(self):
        try:
            self._connection.execute(SCHEMA_SQL)
        except duckdb.Error as e:
            raise StorageError(f"Failed to initialize schema: {e}")

    def init_database(self):
        """初始化数据库"""
        with self._lock:
            self.get_connection()

    def reconfigure(self, db_path: str):
        """切换数据库文件（测试中切到 :memory:）"""
        with self._lock:
            self.close()
            self.db_path = db_path

    def close(self):
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    @contextmanager
    def locked(self) -> Generator["DatabaseManager", None, None]:
        """
        独占访问

        集合的 读取-修改-写回 必须整体放在锁内，否则并发请求会互相覆盖整个集合。
        锁可重入，锁内仍可调用 get_json/put_json/write_log
        """
        with self._lock:
            yield self

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        数据库事务上下文管理器

        进程内通过可重入锁串行化，保证一次读-改-写不会与其他请求交错
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise

    def get_json(self, key: str, default: Any = None) -> Any:
        """读取键对应的 JSON 值，不存在时返回 default"""
        try:
            with self._lock:
                row = self.connection.execute(
                    "SELECT value_json FROM kv_store WHERE key=?", [key]
                ).fetchone()
            if row is None:
                return default
            return json.loads(row[0])
        except (duckdb.Error, ValueError) as e:
            raise StorageError(f"读取 {key} 失败: {e}", {"key": key})

    def put_json(self, key: str, value: Any) -> None:
        """整体覆盖写入键对应的 JSON 值"""
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"序列化 {key} 失败: {e}", {"key": key})
        try:
            with self.transaction() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store(key, value_json, updated_at) VALUES (?, ?, now())",
                    [key, payload],
                )
        except duckdb.Error as e:
            raise StorageError(f"写入 {key} 失败: {e}", {"key": key})

    def has_key(self, key: str) -> bool:
        try:
            with self._lock:
                row = self.connection.execute(
                    "SELECT 1 FROM kv_store WHERE key=?", [key]
                ).fetchone()
            return row is not None
        except duckdb.Error as e:
            raise StorageError(f"读取 {key} 失败: {e}", {"key": key})

    def write_log(self, user_id: Optional[str], action: str, detail: dict):
        """记录操作日志，失败时只写应用日志"""
        try:
            with self._lock:
                self.connection.execute(
                    "INSERT INTO logs(user_id, action, detail_json) VALUES (?,?,?)",
                    [user_id, action, json.dumps(detail, ensure_ascii=False)],
                )
        except (duckdb.Error, TypeError, ValueError) as e:
            logger.error("Failed to write operation log %s: %s", action, e)

    def fetch_logs(self, user_id: str, limit: int, offset: int) -> list:
        with self._lock:
            return self.connection.execute(
                """
                SELECT log_id, user_id, action, detail_json, created_at
                FROM logs
                WHERE user_id=?
                ORDER BY log_id DESC
                LIMIT ? OFFSET ?
                """,
                [user_id, limit, offset],
            ).fetchall()

    def count_logs(self, user_id: str) -> int:
        with self._lock:
            row = self.connection.execute(
                "SELECT COUNT(*) FROM logs WHERE user_id=?", [user_id]
            ).fetchone()
        return row[0] if row else 0


# 全局数据库管理器实例
db_manager = DatabaseManager()
