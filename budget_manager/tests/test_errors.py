"""
Tests for error rendering and the backend API routes

Handlers are called directly, and the Starlette app is driven through its
ASGI interface (no live server).
"""

import json

import pytest
from starlette.exceptions import HTTPException
from starlette.requests import Request

from budget_manager import api
from budget_manager.errors import ErrorHTML, ErrorJSON, status_message_from_template


def make_request(path: str = "/api/test", method: str = "GET") -> Request:
    return Request({
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "headers": [],
        "scheme": "http",
        "server": ("testserver", 80),
        "client": ("testclient", 50000),
        "root_path": "",
        "http_version": "1.1",
    })


async def call_asgi(app, path: str, method: str = "GET"):
    scope = make_request(path, method).scope
    messages = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        messages.append(message)

    await app(scope, receive, send)
    start = next(m for m in messages if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")
    return start["status"], json.loads(body)


class TestErrorJSON:
    def test_renders_404(self):
        assert ErrorJSON.render("404.json", {}) == {"errors": {"detail": "Not Found"}}

    def test_renders_500(self):
        assert ErrorJSON.render("500.json", {}) == {"errors": {"detail": "Internal Server Error"}}

    @pytest.mark.parametrize("template,detail", [
        ("400.json", "Bad Request"),
        ("401.json", "Unauthorized"),
        ("503.json", "Service Unavailable"),
    ])
    def test_uses_the_status_reason_phrase(self, template, detail):
        assert ErrorJSON.render(template) == {"errors": {"detail": detail}}

    @pytest.mark.parametrize("template", ["oops.json", "999.json", ""])
    def test_unknown_templates_fall_back_to_500(self, template):
        assert status_message_from_template(template) == "Internal Server Error"

    def test_html_renders_the_phrase(self):
        assert ErrorHTML.render("404.html") == "Not Found"


class TestHandlers:
    def test_error_response_body_and_status(self):
        response = api.error_response(404)
        assert response.status_code == 404
        assert json.loads(response.body) == {"errors": {"detail": "Not Found"}}

    @pytest.mark.asyncio
    async def test_http_exception_handler(self):
        response = await api.http_exception_handler(make_request(), HTTPException(status_code=405))
        assert response.status_code == 405
        assert json.loads(response.body) == {"errors": {"detail": "Method Not Allowed"}}

    @pytest.mark.asyncio
    async def test_server_error_handler_hides_details(self):
        response = await api.server_error_handler(make_request(), RuntimeError("secret detail"))
        assert response.status_code == 500
        assert json.loads(response.body) == {"errors": {"detail": "Internal Server Error"}}

    @pytest.mark.asyncio
    async def test_not_found_raises_404(self):
        with pytest.raises(HTTPException) as info:
            await api.not_found(make_request("/api/missing"))
        assert info.value.status_code == 404


class FakeRepo:
    def __init__(self, healthy: bool):
        self.healthy = healthy

    async def ping(self):
        if not self.healthy:
            raise ConnectionRefusedError("database down")
        return True


class TestHealth:
    @pytest.mark.asyncio
    async def test_ok_when_database_answers(self, monkeypatch):
        monkeypatch.setattr("budget_manager.db.get_repo", lambda: FakeRepo(True))
        monkeypatch.setattr("budget_manager.application._supervisor", None)

        response = await api.health(make_request("/api/health"))

        assert response.status_code == 200
        assert json.loads(response.body) == {"status": "ok", "children": []}

    @pytest.mark.asyncio
    async def test_503_when_database_is_down(self, monkeypatch):
        monkeypatch.setattr("budget_manager.db.get_repo", lambda: FakeRepo(False))

        response = await api.health(make_request("/api/health"))

        assert response.status_code == 503
        assert json.loads(response.body) == {"errors": {"detail": "Service Unavailable"}}


class TestApiApp:
    @pytest.mark.asyncio
    async def test_unknown_api_path_returns_json_404(self):
        status, body = await call_asgi(api.create_api(), "/api/nope")
        assert status == 404
        assert body == {"errors": {"detail": "Not Found"}}

    @pytest.mark.asyncio
    async def test_requests_are_timed(self, events):
        status, body = await call_asgi(api.create_api(), "/api/metrics")

        assert status == 200
        assert isinstance(body, dict)
        stops = [(m, md) for e, m, md in events if e == "budget_manager.endpoint.stop"]
        assert len(stops) == 1
        measurements, metadata = stops[0]
        assert measurements["duration"] >= 0
        assert metadata["route"] == "/api/metrics"
        assert metadata["status"] == 200
        assert metadata["method"] == "GET"
