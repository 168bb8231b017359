import json
import time
import logging
from datetime import datetime
from typing import Any
from seatable_api import Base
from seatable_api.constants import ColumnTypes
from .models import DEFAULT_SOURCE, DEFAULT_TARGET

logger = logging.getLogger(__name__)

KEY_COLUMN = "Key"

# 列配置（首列 Key 在建表时创建）
COLUMNS = [
    ("Value", ColumnTypes.LONG_TEXT),
    ("Updated", ColumnTypes.DATE),
]

TODOS_KEY = "todos"
SETTINGS_KEY = "settings"


def _esc(s: str) -> str:
    """转义 SQL 单引号"""
    return s.replace("'", "''")


class SeaTableStore:
    """把 SeaTable 表当作键值存储：每个 key 一行，值为 JSON 文本"""

    def __init__(self, server_url: str, api_token: str, table_name: str):
        self.server_url = server_url
        self.api_token = api_token
        self.table_name = table_name
        self.base = None
        self._auth_time = 0

    def init(self):
        """认证 + 确保表/列存在"""
        self.base = Base(self.api_token, self.server_url)
        self.base.auth()
        self._auth_time = time.time()
        self._ensure_table()
        self._ensure_columns()
        logger.info("SeaTable 初始化完成：表=%s", self.table_name)

    def _ensure_table(self):
        metadata = self.base.get_metadata()
        if not any(t["name"] == self.table_name for t in metadata["tables"]):
            self.base.add_table(
                self.table_name,
                lang="en",
                columns=[{"column_name": KEY_COLUMN, "column_type": ColumnTypes.TEXT}],
            )
            logger.info("已创建表：%s", self.table_name)

    def _ensure_columns(self):
        metadata = self.base.get_metadata()
        existing_cols = {
            c["name"]
            for t in metadata["tables"]
            if t["name"] == self.table_name
            for c in t.get("columns", [])
        }

        for col_name, col_type in COLUMNS:
            if col_name in existing_cols:
                continue
            self.base.insert_column(self.table_name, col_name, col_type)
            logger.info("已添加列：%s (%s)", col_name, col_type)

    def _find_row(self, key: str) -> dict | None:
        sql = (
            f"SELECT _id, `Value` FROM `{self.table_name}` "
            f"WHERE `{KEY_COLUMN}`='{_esc(key)}' LIMIT 1"
        )
        rows = self.base.query(sql)
        return rows[0] if rows else None

    def get(self, key: str) -> Any:
        """读取 key 对应的 JSON 值，不存在时返回 None"""
        self.refresh_auth_if_needed()
        row = self._find_row(key)
        if not row:
            return None
        raw = row.get("Value")
        # 长文本列有时以 {"text": ...} 形式返回
        if isinstance(raw, dict):
            raw = raw.get("text")
        if not raw:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any):
        """整体覆盖写入，无版本/事务"""
        self.refresh_auth_if_needed()
        row_data = {
            KEY_COLUMN: key,
            "Value": json.dumps(value, ensure_ascii=False),
            "Updated": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        }
        row = self._find_row(key)
        if row:
            self.base.update_row(self.table_name, row["_id"], row_data)
        else:
            self.base.append_row(self.table_name, row_data)
        logger.debug("已写入 key=%s", key)

    def load_todos(self) -> dict:
        todos = self.get(TODOS_KEY)
        return todos if todos is not None else {}

    def save_todos(self, todos: dict):
        self.set(TODOS_KEY, todos)

    def load_settings(self) -> dict:
        settings = self.get(SETTINGS_KEY)
        if settings is None:
            return {"source": DEFAULT_SOURCE, "target": DEFAULT_TARGET}
        return settings

    def save_settings(self, settings: dict):
        self.set(SETTINGS_KEY, settings)

    def refresh_auth_if_needed(self):
        """base_token 有效期 3 天，超 2 天自动刷新"""
        if time.time() - self._auth_time > 2 * 86400:
            self.base.auth()
            self._auth_time = time.time()
            logger.info("SeaTable token 已刷新")
