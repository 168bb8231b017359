import argparse
import logging
import sys

from .api_client import ApiError, ChecklistApiClient
from .config import ConfigError, load_config, load_urls, user_file
from .display import format_url_display, render_item, render_progress
from .identity import UserFileError, load_user, set_user_name
from .models import STATUSES, UrlSettings
from .seatable_client import SeaTableStore
from .server import create_app
from .state import ChecklistState

logger = logging.getLogger("migration-checklist")

DEFAULT_API_URL = "http://127.0.0.1:8000"


class ChecklistError(RuntimeError):
    pass


def _make_client(config: dict) -> ChecklistApiClient:
    client_conf = config.get("client", {})
    return ChecklistApiClient(
        client_conf.get("api_url", DEFAULT_API_URL),
        timeout=client_conf.get("timeout", 10),
    )


def _load_state(config: dict) -> ChecklistState:
    state = ChecklistState(_make_client(config), load_urls(config))
    if not state.load():
        raise ChecklistError(state.error)
    return state


def _resolve_url(state: ChecklistState, ref: str) -> str:
    """支持按 URL 或列表中的 1-based 序号引用"""
    if ref.isdigit():
        index = int(ref)
        if 1 <= index <= len(state.urls):
            return state.urls[index - 1]
        raise ChecklistError(f"Index out of range: {ref}")
    if ref in state.urls:
        return ref
    raise ChecklistError(f"URL not in checklist: {ref}")


def cmd_serve(args: argparse.Namespace) -> int:
    config = args.config
    store = SeaTableStore(
        server_url=config["seatable"]["server_url"],
        api_token=config["seatable"]["api_token"],
        table_name=config["seatable"].get("table_name", "migration_state"),
    )
    store.init()
    app = create_app(store)

    server_conf = config.get("server", {})
    host = server_conf.get("host", "127.0.0.1")
    port = server_conf.get("port", 8000)
    logger.info("启动服务：%s:%d", host, port)
    app.run(host=host, port=port)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    state = _load_state(args.config)
    user = load_user(user_file(args.config))
    user_names = {user.id: user.name} if user else {}

    print(render_progress(state.progress()))
    for i, item in enumerate(state.items(), start=1):
        print(render_item(i, item, state.settings, user_names))
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    user = load_user(user_file(args.config))
    if user is None:
        raise ChecklistError("No user set, run `whoami --name NAME` first")

    state = _load_state(args.config)
    url = _resolve_url(state, args.url)
    if not state.update_status(url, args.status, user.id):
        raise ChecklistError(state.error)
    print(f"{format_url_display(url, state.settings.source)}: {args.status}")
    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    state = _load_state(args.config)
    url = _resolve_url(state, args.url)
    if not state.update_migrated_url(url, args.new_url):
        raise ChecklistError(state.error)
    item = state.item(url)
    note = " (needs 301)" if item.needs_301 else ""
    print(f"{format_url_display(url, state.settings.source)} → {args.new_url}{note}")
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    state = _load_state(args.config)
    if args.source or args.target:
        settings = UrlSettings(
            source=args.source or state.settings.source,
            target=args.target or state.settings.target,
        )
        if not state.update_settings(settings):
            raise ChecklistError(state.error)
    print(f"source: {state.settings.source}")
    print(f"target: {state.settings.target}")
    return 0


def cmd_whoami(args: argparse.Namespace) -> int:
    path = user_file(args.config)
    if args.name:
        user = set_user_name(args.name, path)
    else:
        user = load_user(path)
        if user is None:
            raise ChecklistError("No user set, run `whoami --name NAME` first")
    print(f"{user.name} ({user.id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="migration-checklist")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    serve = sub.add_parser("serve")
    serve.set_defaults(func=cmd_serve)

    ls = sub.add_parser("list")
    ls.set_defaults(func=cmd_list)

    st = sub.add_parser("status")
    st.add_argument("url")
    st.add_argument("status", choices=STATUSES)
    st.set_defaults(func=cmd_status)

    mg = sub.add_parser("migrate")
    mg.add_argument("url")
    mg.add_argument("new_url")
    mg.set_defaults(func=cmd_migrate)

    se = sub.add_parser("settings")
    se.add_argument("--source")
    se.add_argument("--target")
    se.set_defaults(func=cmd_settings)

    who = sub.add_parser("whoami")
    who.add_argument("--name")
    who.set_defaults(func=cmd_whoami)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    try:
        args.config = load_config()
        return args.func(args)
    except (ChecklistError, ApiError, ConfigError, UserFileError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
