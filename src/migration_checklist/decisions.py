import re
from collections.abc import Mapping
from urllib.parse import quote

from .models import DISPLAY_ORDER, STATUSES, ProgressSegment, TodoItem

_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_C0_AND_SPACE = "".join(chr(i) for i in range(0x21))
SPECIAL_SCHEMES = {"http", "https", "ws", "wss", "ftp", "file"}
# path percent-encode set 之外的 ASCII 标点，其余字符（含非 ASCII）一律编码
_PATH_SAFE = "!$%&'()*+,/:;=@[\\]^|"


def _remove_dot_segments(path: str) -> str:
    """处理 . / .. 段（含 %2e 写法），保留空段"""
    segments = path.split("/")[1:]
    output: list[str] = []
    for i, seg in enumerate(segments):
        last = i == len(segments) - 1
        name = seg.lower().replace("%2e", ".")
        if name == "..":
            if output:
                output.pop()
            if last:
                output.append("")
        elif name == ".":
            if last:
                output.append("")
        else:
            output.append(seg)
    return "/" + "/".join(output)


def _url_pathname(url: str) -> str | None:
    """按浏览器 URL 解析规则取 pathname；不是合法绝对 URL 时返回 None"""
    value = re.sub(r"[\t\n\r]", "", url.strip(_C0_AND_SPACE))
    m = _SCHEME_RE.match(value)
    if not m:
        return None
    scheme = m.group()[:-1].lower()
    rest = re.split(r"[?#]", value[m.end():], maxsplit=1)[0]

    if scheme in SPECIAL_SCHEMES:
        rest = rest.replace("\\", "/")
        if scheme == "file":
            if rest.startswith("//"):
                rest = rest[2:].partition("/")[2]
            path = "/" + rest.lstrip("/")
        else:
            host, _, path = rest.lstrip("/").partition("/")
            if not host or " " in host:
                return None
            path = "/" + path
    elif rest.startswith("//"):
        _, sep, path = rest[2:].partition("/")
        path = sep + path
    elif rest.startswith("/"):
        path = rest
    else:
        # 不透明路径，如 mailto:x
        return rest

    if path:
        path = _remove_dot_segments(path)
    return quote(path, safe=_PATH_SAFE)


def _normalize_path(url: str) -> str:
    """绝对 URL 取 pathname，否则按原字符串处理；去掉末尾所有斜杠"""
    path = _url_pathname(url)
    if path is None:
        path = url
    return path.rstrip("/")


def _base_segment(path: str) -> str:
    segments = [s for s in path.split("/") if s]
    return segments[-1] if segments else ""


def needs_redirect(original_url: str, migrated_url: str) -> bool:
    """新旧地址 path 不同即需要 301"""
    original_path = _normalize_path(original_url)
    migrated_path = _normalize_path(migrated_url)

    if original_path == migrated_path:
        return False

    # 末段比较不影响结果：走到这里 path 必然不同
    original_base = _base_segment(original_path)
    migrated_base = _base_segment(migrated_path)
    return original_base != migrated_base or original_path != migrated_path


def aggregate_progress(items_by_url: Mapping[str, TodoItem], total: int) -> list[ProgressSegment]:
    """按固定顺序统计各状态占比。

    pending 不从存储读取，而是 total 减去其余状态之和，因此未出现在 map 中
    的 URL 计入 pending。total 为 0 时所有百分比为 0。
    """
    counts = {status: 0 for status in STATUSES}
    for item in items_by_url.values():
        if item.status != "pending" and item.status in counts:
            counts[item.status] += 1
    counts["pending"] = total - sum(c for s, c in counts.items() if s != "pending")

    return [
        ProgressSegment(
            status=status,
            count=counts[status],
            percentage=counts[status] / total * 100 if total else 0.0,
        )
        for status in DISPLAY_ORDER
    ]
