from __future__ import annotations

import re
from urllib.parse import urlsplit

import pytest

from migration_checklist import seatable_client
from migration_checklist.api_client import ChecklistApiClient
from migration_checklist.seatable_client import SeaTableStore
from migration_checklist.server import create_app
from migration_checklist.state import ChecklistState

_QUERY_RE = re.compile(r"FROM `(?P<table>[^`]+)` WHERE `Key`='(?P<key>(?:[^']|'')*)'")

URLS = [
    "https://zetarmold.com/",
    "https://zetarmold.com/about/",
    "https://zetarmold.com/products/mold-a/",
    "https://zetarmold.com/contact/",
]


class FakeBase:
    """In-memory stand-in for seatable_api.Base covering the calls SeaTableStore makes."""

    def __init__(self, api_token: str, server_url: str) -> None:
        self.api_token = api_token
        self.server_url = server_url
        self.tables: dict[str, dict] = {}
        self.auth_calls = 0
        self.fail = False
        self._next_row = 1

    def _check(self) -> None:
        if self.fail:
            raise RuntimeError("SeaTable unavailable")

    def auth(self) -> None:
        self.auth_calls += 1

    def get_metadata(self) -> dict:
        return {
            "tables": [
                {"name": name, "columns": [{"name": c} for c in t["columns"]]}
                for name, t in self.tables.items()
            ]
        }

    def add_table(self, table_name: str, lang: str = "en", columns: list | None = None) -> None:
        names = [c["column_name"] for c in columns or []] or ["Name"]
        self.tables[table_name] = {"columns": names, "rows": []}

    def insert_column(self, table_name: str, column_name: str, column_type, column_key=None, column_data=None) -> None:
        self.tables[table_name]["columns"].append(column_name)

    def query(self, sql: str) -> list[dict]:
        self._check()
        m = _QUERY_RE.search(sql)
        assert m, sql
        key = m.group("key").replace("''", "'")
        rows = [r for r in self.tables[m.group("table")]["rows"] if r.get("Key") == key]
        return [{"_id": r["_id"], "Value": r.get("Value")} for r in rows[:1]]

    def append_row(self, table_name: str, row_data: dict) -> dict:
        self._check()
        row = {"_id": f"row{self._next_row}", **row_data}
        self._next_row += 1
        self.tables[table_name]["rows"].append(row)
        return row

    def update_row(self, table_name: str, row_id: str, row_data: dict) -> None:
        self._check()
        for row in self.tables[table_name]["rows"]:
            if row["_id"] == row_id:
                row.update(row_data)
                return
        raise KeyError(row_id)


class _Response:
    def __init__(self, status_code: int, data) -> None:
        self.status_code = status_code
        self._data = data

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return self._data


class FlaskSession:
    """Routes requests-style calls into a Flask test client."""

    def __init__(self, client) -> None:
        self.client = client
        self.calls: list[tuple[str, str]] = []

    def request(self, method: str, url: str, json=None, timeout=None) -> _Response:
        path = urlsplit(url).path
        self.calls.append((method, path))
        resp = self.client.open(path, method=method, json=json)
        return _Response(resp.status_code, resp.get_json(silent=True))


@pytest.fixture
def fake_base_factory(monkeypatch: pytest.MonkeyPatch) -> list[FakeBase]:
    created: list[FakeBase] = []

    def factory(api_token: str, server_url: str) -> FakeBase:
        base = FakeBase(api_token, server_url)
        created.append(base)
        return base

    monkeypatch.setattr(seatable_client, "Base", factory)
    return created


@pytest.fixture
def store(fake_base_factory: list[FakeBase]) -> SeaTableStore:
    s = SeaTableStore("https://seatable.test", "token", "migration_state")
    s.init()
    return s


@pytest.fixture
def http_client(store: SeaTableStore):
    app = create_app(store)
    app.config.update(TESTING=True)
    return app.test_client()


@pytest.fixture
def session(http_client) -> FlaskSession:
    return FlaskSession(http_client)


@pytest.fixture
def api(session: FlaskSession) -> ChecklistApiClient:
    return ChecklistApiClient("http://checklist.test", session=session)


@pytest.fixture
def urls() -> list[str]:
    return list(URLS)


@pytest.fixture
def state(api: ChecklistApiClient, urls: list[str]) -> ChecklistState:
    s = ChecklistState(api, urls)
    assert s.load()
    return s
