from .models import STATUS_ICONS, STATUS_LABELS, ProgressSegment, TodoItem, UrlSettings


def format_url_display(url: str, base: str) -> str:
    """去掉站点前缀与末尾斜杠；什么都不剩时显示 home"""
    prefix = base.rstrip("/") + "/"
    path = url.removeprefix(prefix).rstrip("/")
    return path or "home"


def render_progress(segments: list[ProgressSegment]) -> str:
    return "  ".join(f"{s.label}: {round(s.percentage)}%" for s in segments)


def render_item(index: int, item: TodoItem, settings: UrlSettings, user_names: dict[str, str]) -> str:
    original = format_url_display(item.url, settings.source)
    if item.migrated_url:
        migrated = format_url_display(item.migrated_url, settings.target)
    else:
        migrated = "No new URL set"

    line = (
        f"{index:>3}. {STATUS_ICONS.get(item.status, '?')} "
        f"{STATUS_LABELS.get(item.status, item.status):12} {original} → {migrated}"
    )
    if item.needs_301:
        line += "  [301]"
    if item.assignee:
        line += f"  @{user_names.get(item.assignee, item.assignee)}"
    return line
