import importlib
import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient

from app.clinica.core.clock import get_clock
from tests.cash_helpers import FrozenClock, local_time


def _setup_app(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    os.environ["SECRET_KEY"] = "test-secret"

    import app.clinica.core.config as config
    import app.clinica.db.session as session
    import app.main as main

    importlib.reload(config)
    importlib.reload(session)
    importlib.reload(main)

    return main.create_app(), session


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


@pytest.fixture()
def frozen_clock():
    return FrozenClock(local_time(8, 0))


@pytest.fixture()
def test_app(tmp_path: Path, frozen_clock):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'test.db'}"
    _run_migrations(database_url)
    application, session = _setup_app(database_url)
    application.dependency_overrides[get_clock] = lambda: frozen_clock
    yield application
    session.engine.dispose()


@pytest.fixture()
def client(test_app):
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture()
def db_session(client):
    from app.clinica.db.session import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
