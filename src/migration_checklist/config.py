import os
import tomllib
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "migration-checklist"


class ConfigError(RuntimeError):
    pass


def load_config() -> dict:
    """加载配置，优先级：环境变量 > config.toml > 默认值"""
    config_path = os.environ.get("MIGRATION_CHECKLIST_CONFIG")
    if not config_path:
        local = Path("config.toml")
        if local.exists():
            config_path = str(local)
        else:
            config_path = str(CONFIG_DIR / "config.toml")

    with open(config_path, "rb") as f:
        try:
            config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
    config["_path"] = config_path

    # 环境变量覆盖 token
    env_token = os.environ.get("SEATABLE_API_TOKEN")
    if env_token:
        config.setdefault("seatable", {})["api_token"] = env_token

    return config


def load_urls(config: dict) -> list[str]:
    """读取固定的待迁移 URL 列表：内联 urls 优先，否则读 urls_file"""
    section = config.get("checklist", {})
    raw = section.get("urls")
    if raw is None:
        urls_file = section.get("urls_file")
        if not urls_file:
            return []
        path = Path(urls_file).expanduser()
        # 相对路径按配置文件所在目录解析
        if not path.is_absolute() and config.get("_path"):
            path = Path(config["_path"]).parent / path
        raw = path.read_text(encoding="utf-8").splitlines()

    urls: list[str] = []
    seen = set()
    for line in raw:
        url = line.strip()
        if not url or url.startswith("#") or url in seen:
            continue
        seen.add(url)
        urls.append(url)
    return urls


def user_file(config: dict) -> Path:
    path = config.get("client", {}).get("user_file")
    return Path(path).expanduser() if path else CONFIG_DIR / "user.json"
