"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Generator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from backend.fluent.config import Settings
from backend.fluent.db.models import Base

RequestFactory = Callable[..., Request]


@pytest.fixture
def make_request() -> RequestFactory:
    """Factory for bare Starlette requests.

    Usage:
        def test_something(make_request):
            request = make_request("/admin/pages", query="l=fr", host="example.com")
    """

    def _make(path: str = "/", query: str = "", host: str = "example.com") -> Request:
        scope = {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "path": path,
            "root_path": "",
            "query_string": query.encode(),
            "headers": [(b"host", host.encode())],
            "server": (host.split(":")[0], 80),
        }
        return Request(scope)

    return _make


@pytest.fixture
def settings() -> Settings:
    """Settings with routing defaults, independent of any .env file."""
    return Settings(
        _env_file=None,
        admin_url_paths=["dev/", "graphql/"],
        admin_url_base="admin",
        query_param="l",
        force_domain=False,
        force_domain_env_var="SS_FLUENT_FORCE_DOMAIN",
    )


@pytest.fixture
def sqlite_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared across connections."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()
