"""
Pytest configuration for the Price Archive API.

Provides fixtures for:
- In-memory SQLite engine and sessions
- Zip/tar archive builders
- FastAPI test clients in content and identifier mode
"""

from __future__ import annotations

import io
import tarfile
import zipfile
from typing import Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from api.main import create_app
from core.config import Settings
from db.session import create_db_engine, create_session_factory, init_db


def _engine(identifier_mode: str) -> Engine:
    engine = create_db_engine("sqlite://")
    init_db(engine, identifier_mode)
    return engine


def _session(engine: Engine) -> Generator[Session, None, None]:
    SessionLocal = create_session_factory(engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory content-mode database per test."""
    engine = _engine("content")
    yield engine
    engine.dispose()


@pytest.fixture
def identifier_engine() -> Generator[Engine, None, None]:
    """Fresh in-memory identifier-mode database per test."""
    engine = _engine("identifier")
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    yield from _session(engine)


@pytest.fixture
def identifier_db_session(identifier_engine: Engine) -> Generator[Session, None, None]:
    yield from _session(identifier_engine)


@pytest.fixture
def make_zip() -> Callable[[Dict[str, str]], bytes]:
    """Build zip bytes from a {member name: text} mapping."""

    def _make(files: Dict[str, str]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, text in files.items():
                archive.writestr(name, text)
        return buffer.getvalue()

    return _make


@pytest.fixture
def make_tar() -> Callable[[Dict[str, str]], bytes]:
    """Build tar bytes from a {member name: text} mapping."""

    def _make(files: Dict[str, str]) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as archive:
            for name, text in files.items():
                payload = text.encode("utf-8")
                info = tarfile.TarInfo(name=name)
                info.size = len(payload)
                archive.addfile(info, io.BytesIO(payload))
        return buffer.getvalue()

    return _make


def _client(engine: Engine, **overrides) -> TestClient:
    app_settings = Settings(database_url="sqlite://", log_level="WARNING", **overrides)
    return TestClient(create_app(app_settings, engine=engine))


@pytest.fixture
def client(engine: Engine) -> Generator[TestClient, None, None]:
    with _client(engine) as test_client:
        yield test_client


@pytest.fixture
def identifier_client(identifier_engine: Engine) -> Generator[TestClient, None, None]:
    with _client(identifier_engine, identifier_mode="identifier") as test_client:
        yield test_client


@pytest.fixture
def small_upload_client(engine: Engine) -> Generator[TestClient, None, None]:
    with _client(engine, max_upload_bytes=64) as test_client:
        yield test_client
