from __future__ import annotations

import pytest


@pytest.mark.integration
def test_get_todos_empty(http_client) -> None:
    resp = http_client.get("/todos")
    assert resp.status_code == 200
    assert resp.get_json() == {}


@pytest.mark.integration
def test_put_todos_stores_verbatim(http_client, store) -> None:
    body = {
        "https://zetarmold.com/about/": {
            "url": "https://zetarmold.com/about/",
            "status": "inProgress",
            "assignee": "1700000000000-abcde",
            "updatedAt": 1700000000000,
        },
        "https://zetarmold.com/stale/": {"url": "https://zetarmold.com/stale/", "status": "completed", "updatedAt": 1},
    }
    resp = http_client.put("/todos", json=body)
    assert resp.status_code == 200
    assert resp.get_json() == body
    assert store.load_todos() == body
    assert http_client.get("/todos").get_json() == body


@pytest.mark.integration
def test_settings_default_and_update(http_client) -> None:
    assert http_client.get("/settings").get_json() == {
        "source": "https://zetarmold.com",
        "target": "https://google.com",
    }
    new = {"source": "https://legacy.example", "target": "https://new.example"}
    assert http_client.put("/settings", json=new).get_json() == new
    assert http_client.get("/settings").get_json() == new


@pytest.mark.integration
@pytest.mark.parametrize(
    "method,path,message",
    [
        ("GET", "/todos", "Failed to get todos"),
        ("PUT", "/todos", "Failed to update todos"),
        ("GET", "/settings", "Failed to get settings"),
        ("PUT", "/settings", "Failed to update settings"),
    ],
)
def test_store_failure_returns_500(http_client, store, method: str, path: str, message: str) -> None:
    store.base.fail = True
    resp = http_client.open(path, method=method, json={})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": message}


@pytest.mark.integration
def test_invalid_body_returns_500(http_client) -> None:
    resp = http_client.put("/todos", data="{not json", content_type="application/json")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to update todos"}
