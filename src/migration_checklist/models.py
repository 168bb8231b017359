from dataclasses import dataclass
from typing import Any, Literal

TodoStatus = Literal["pending", "inProgress", "completed", "questioned"]

STATUSES: tuple[str, ...] = ("pending", "inProgress", "completed", "questioned")

# 进度条 / 列表展示顺序
DISPLAY_ORDER: tuple[str, ...] = ("completed", "inProgress", "questioned", "pending")

STATUS_LABELS = {
    "completed": "Completed",
    "inProgress": "In Progress",
    "questioned": "Needs Review",
    "pending": "Pending",
}

STATUS_ICONS = {
    "completed": "✓",
    "pending": "○",
    "inProgress": "►",
    "questioned": "?",
}

DEFAULT_SOURCE = "https://zetarmold.com"
DEFAULT_TARGET = "https://google.com"


def _as_millis(value: Any) -> int:
    """非数字的时间戳按 0 处理"""
    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass
class TodoItem:
    url: str                        # 原地址，同时是 map 的 key
    status: TodoStatus = "pending"  # 见 STATUSES
    updated_at: int = 0             # 毫秒时间戳
    assignee: str | None = None     # 设为 inProgress 时的用户 id
    migrated_url: str | None = None # 新站地址
    needs_301: bool | None = None   # 与 migrated_url 同时写入

    @classmethod
    def from_dict(cls, url: str, data: dict[str, Any]) -> "TodoItem":
        """从存储格式（camelCase）解析，缺失字段取默认值"""
        return cls(
            url=data.get("url") or url,
            status=data.get("status") or "pending",
            updated_at=_as_millis(data.get("updatedAt")),
            assignee=data.get("assignee"),
            migrated_url=data.get("migratedUrl"),
            needs_301=data.get("needs301"),
        )

    def to_dict(self) -> dict[str, Any]:
        """转为存储格式，未设置的可选字段不输出"""
        data: dict[str, Any] = {
            "url": self.url,
            "status": self.status,
            "updatedAt": self.updated_at,
        }
        if self.assignee is not None:
            data["assignee"] = self.assignee
        if self.migrated_url is not None:
            data["migratedUrl"] = self.migrated_url
        if self.needs_301 is not None:
            data["needs301"] = self.needs_301
        return data


@dataclass(frozen=True)
class UrlSettings:
    source: str = DEFAULT_SOURCE
    target: str = DEFAULT_TARGET

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UrlSettings":
        return cls(
            source=data.get("source", DEFAULT_SOURCE),
            target=data.get("target", DEFAULT_TARGET),
        )

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target}


@dataclass(frozen=True)
class User:
    name: str
    id: str   # 客户端生成：毫秒时间戳-5位随机串


@dataclass(frozen=True)
class ProgressSegment:
    status: str
    count: int
    percentage: float

    @property
    def label(self) -> str:
        return STATUS_LABELS[self.status]


def todos_from_wire(data: dict[str, Any]) -> dict[str, TodoItem]:
    """解析整张 todos map；值不是对象的脏数据直接跳过"""
    return {
        url: TodoItem.from_dict(url, raw)
        for url, raw in data.items()
        if isinstance(raw, dict)
    }


def todos_to_wire(todos: dict[str, TodoItem]) -> dict[str, dict[str, Any]]:
    return {url: item.to_dict() for url, item in todos.items()}
