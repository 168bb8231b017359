import logging
import time
from dataclasses import replace

from .api_client import ApiError, ChecklistApiClient
from .decisions import aggregate_progress, needs_redirect
from .models import (
    ProgressSegment,
    TodoItem,
    TodoStatus,
    UrlSettings,
    todos_from_wire,
    todos_to_wire,
)

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChecklistState:
    """客户端内存状态：整张 map 读入，每次编辑整体写回（后写覆盖）"""

    def __init__(self, api: ChecklistApiClient, urls: list[str]):
        self.api = api
        self.urls = urls
        self.todos: dict[str, TodoItem] = {}
        self._unparsed: dict = {}
        self.settings = UrlSettings()
        self.is_loading = False
        self.error: str | None = None

    def load(self) -> bool:
        self.is_loading = True
        self.error = None
        try:
            todos = self.api.get_todos()
            settings = self.api.get_settings()
        except ApiError as e:
            logger.error("加载数据失败：%s", e)
            self.error = str(e)
            return False
        finally:
            self.is_loading = False

        # PUT /todos 原样存储任意 JSON，非对象一律按空处理
        if not isinstance(todos, dict):
            if todos:
                logger.warning("todos 不是对象（%s），按空列表处理", type(todos).__name__)
            todos = {}
        if not isinstance(settings, dict):
            if settings:
                logger.warning("settings 不是对象（%s），使用默认值", type(settings).__name__)
            settings = {}

        self.todos = todos_from_wire(todos)
        # 解析不了的条目原样保留，整体写回时不丢
        self._unparsed = {url: raw for url, raw in todos.items() if url not in self.todos}
        for url in self._unparsed:
            logger.warning("跳过无法解析的记录：%s", url)
        self.settings = UrlSettings.from_dict(settings)
        logger.debug("已加载 %d 条记录", len(self.todos))
        return True

    def item(self, url: str) -> TodoItem:
        """未存储的 URL 视为 pending"""
        stored = self.todos.get(url)
        if stored is None:
            return TodoItem(url=url)
        return replace(stored, url=url)

    def items(self) -> list[TodoItem]:
        return [self.item(url) for url in self.urls]

    def progress(self) -> list[ProgressSegment]:
        return aggregate_progress(self.todos, len(self.urls))

    def _write_todos(self, new_todos: dict[str, TodoItem]) -> bool:
        try:
            self.api.put_todos({**self._unparsed, **todos_to_wire(new_todos)})
        except ApiError as e:
            logger.error("写入 todos 失败：%s", e)
            self.error = str(e)
            return False
        self.todos = new_todos
        return True

    def update_status(self, url: str, status: TodoStatus, user_id: str) -> bool:
        """改状态；仅在设为 inProgress 时写 assignee，其余情况保留原值"""
        current = self.todos.get(url) or TodoItem(url=url)
        updated = replace(current, url=url, status=status, updated_at=_now_ms())
        if status == "inProgress":
            updated = replace(updated, assignee=user_id)
        return self._write_todos({**self.todos, url: updated})

    def update_migrated_url(self, original_url: str, migrated_url: str) -> bool:
        current = self.todos.get(original_url) or TodoItem(url=original_url)
        updated = replace(
            current,
            migrated_url=migrated_url,
            needs_301=needs_redirect(original_url, migrated_url),
            updated_at=_now_ms(),
        )
        return self._write_todos({**self.todos, original_url: updated})

    def update_settings(self, settings: UrlSettings) -> bool:
        try:
            self.api.put_settings(settings.to_dict())
        except ApiError as e:
            logger.error("写入 settings 失败：%s", e)
            self.error = str(e)
            return False
        self.settings = settings
        return True
