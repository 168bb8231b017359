import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    pass


class ChecklistApiClient:
    """/todos 与 /settings 的 HTTP 客户端"""

    def __init__(self, base_url: str, session=None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, failure: str, payload: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("%s %s 请求失败：%s", method, url, e)
            raise ApiError(failure) from e
        if not resp.ok:
            logger.warning("%s %s 返回 %s", method, url, resp.status_code)
            raise ApiError(failure)
        try:
            return resp.json()
        except ValueError as e:
            # 代理 / 网关返回的 HTML 错误页等
            logger.warning("%s %s 响应不是 JSON：%s", method, url, e)
            raise ApiError(failure) from e

    def get_todos(self) -> dict:
        return self._request("GET", "/todos", "Failed to fetch todos")

    def put_todos(self, todos: dict) -> dict:
        return self._request("PUT", "/todos", "Failed to update todos", todos)

    def get_settings(self) -> dict:
        return self._request("GET", "/settings", "Failed to fetch settings")

    def put_settings(self, settings: dict) -> dict:
        return self._request("PUT", "/settings", "Failed to update settings", settings)
