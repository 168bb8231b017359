import json
import random
import string
import time
from pathlib import Path

from .models import User

_ID_CHARS = string.digits + string.ascii_lowercase


class UserFileError(RuntimeError):
    pass


def generate_user_id() -> str:
    """毫秒时间戳 + 5 位 base36 随机串，不做服务端校验"""
    suffix = "".join(random.choices(_ID_CHARS, k=5))
    return f"{int(time.time() * 1000)}-{suffix}"


def load_user(path: Path) -> User | None:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return User(name=data["name"], id=data["id"])
    except (ValueError, KeyError, TypeError) as e:
        raise UserFileError(f"Invalid user file {path}, run `whoami --name NAME` to reset it") from e


def save_user(user: User, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"name": user.name, "id": user.id}, ensure_ascii=False),
        encoding="utf-8",
    )


def set_user_name(name: str, path: Path) -> User:
    """改名时保留已有 id，首次使用时生成新 id"""
    try:
        existing = load_user(path)
    except UserFileError:
        # 文件损坏时重新生成
        existing = None
    user = User(name=name, id=existing.id if existing else generate_user_id())
    save_user(user, path)
    return user
