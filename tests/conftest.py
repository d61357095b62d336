"""
Shared fixtures.

Applications are built in fixtures rather than test bodies because
``create_app`` reconfigures root logging, which would drop ``caplog``'s
handler if done during the test call.
"""

import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.testclient import TestClient
from pydantic import BaseModel

from bridge.core.config import Settings
from bridge.main import create_app
from bridge.shared.errors.taxonomy import AppError
from bridge.shared.errors.validation import check_validation_failures


class Applicant(BaseModel):
    email: str
    age: int


def _add_sample_routes(app: FastAPI) -> dict[str, list]:
    """Attach routes that echo what business logic would receive."""
    calls: dict[str, list] = {"echo": []}

    @app.post("/sample/echo")
    async def echo(request: Request) -> dict:
        payload = await request.json()
        calls["echo"].append(payload)
        return {"body": payload, "query": dict(request.query_params)}

    @app.get("/sample/query")
    async def query(q: str = "") -> dict:
        return {"q": q}

    @app.get("/sample/items/{item_id}")
    async def item(item_id: str) -> dict:
        return {"item_id": item_id}

    @app.post("/sample/applicants")
    async def applicant(body: Applicant) -> dict:
        return body.model_dump()

    @app.get("/sample/missing")
    async def missing() -> dict:
        raise AppError.not_found("Job")

    @app.get("/sample/unavailable")
    async def unavailable() -> dict:
        raise AppError.service_unavailable()

    @app.get("/sample/boom")
    async def boom() -> dict:
        raise RuntimeError("boom")

    @app.get("/sample/sync-boom")
    def sync_boom() -> dict:
        raise KeyError("missing-key")

    @app.get("/sample/restricted")
    async def restricted() -> dict:
        raise HTTPException(status_code=403, detail="No access")

    @app.get("/sample/feed")
    async def feed(request: Request) -> dict:
        request.state.validation_failures = [
            {"path": ["email"], "message": "invalid"},
        ]
        check_validation_failures(request)
        return {"ok": True}

    return calls


def _settings(**overrides) -> Settings:
    values = {"rate_limit_enabled": False, "log_level": "WARNING"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def sample_app() -> tuple[FastAPI, dict[str, list]]:
    app = create_app(_settings())
    calls = _add_sample_routes(app)
    return app, calls


@pytest.fixture
def client(sample_app) -> TestClient:
    return TestClient(sample_app[0])


@pytest.fixture
def dev_client() -> TestClient:
    app = create_app(_settings(environment="development"))
    _add_sample_routes(app)
    return TestClient(app)


@pytest.fixture
def limited_client() -> TestClient:
    app = create_app(_settings(rate_limit_enabled=True, rate_limit_default="2/minute"))
    return TestClient(app)


@pytest.fixture
def shallow_client() -> tuple[TestClient, dict[str, list]]:
    app = create_app(_settings(sanitize_max_depth=3))
    calls = _add_sample_routes(app)
    return TestClient(app), calls


def _make_request(path: str = "/api/v1/jobs", method: str = "GET") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "scheme": "http",
        "server": ("testserver", 80),
        "client": ("10.0.0.7", 52100),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [(b"user-agent", b"pytest-agent"), (b"host", b"testserver")],
    }
    return Request(scope)


@pytest.fixture
def make_request():
    """Factory for bare requests, used to call handlers directly."""
    return _make_request
