from types import SimpleNamespace

import pytest
from sqlalchemy import inspect

import infra.db.session as session_module
from infra.config.config import DatabaseConfig


class FakeEngine:
    def __init__(self) -> None:
        self.disposed = False
        self.sync_engine = object()

    async def dispose(self) -> None:
        self.disposed = True


def _database_config(**overrides) -> SimpleNamespace:
    values = {
        "DRIVER": "postgres",
        "SQLITE_PATH": "./site_admin.db",
        "USER": "db_user",
        "PASSWORD": "db_password",
        "HOST": "localhost",
        "PORT": 5432,
        "DATABASE": "site_admin",
        "ECHO": True,
        "POOL_SIZE": 5,
        "MAX_OVERFLOW": 10,
        "POOL_TIMEOUT": 12,
        "POOL_RECYCLE": 120,
    }
    values.update(overrides)
    return SimpleNamespace(DATABASE_CONFIG=SimpleNamespace(**values))


def test_build_database_url_for_each_driver() -> None:
    postgres = DatabaseConfig(
        DRIVER="postgres", USER="admin", PASSWORD="secret", HOST="db", PORT=5433, DATABASE="sites"
    )
    sqlite = DatabaseConfig(DRIVER="sqlite", SQLITE_PATH="./tmp/sites.db")

    url = session_module.build_database_url(postgres)

    assert (url.drivername, url.username, url.host, url.port, url.database) == (
        "postgresql+asyncpg",
        "admin",
        "db",
        5433,
        "sites",
    )
    assert session_module.build_database_url(sqlite).render_as_string() == "sqlite+aiosqlite:///./tmp/sites.db"


def test_get_engine_passes_pool_settings_for_postgres(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    fake_engine = FakeEngine()

    def fake_create_async_engine(url, **kwargs):
        captured["url"] = url
        captured["kwargs"] = kwargs
        return fake_engine

    monkeypatch.setattr(session_module, "get_config", lambda: _database_config())
    monkeypatch.setattr(session_module, "create_async_engine", fake_create_async_engine)

    assert session_module.get_engine() is fake_engine
    assert captured["url"].drivername == "postgresql+asyncpg"
    assert captured["kwargs"] == {
        "echo": True,
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 12,
        "pool_recycle": 120,
    }


def test_get_engine_registers_foreign_key_pragma_for_sqlite(monkeypatch: pytest.MonkeyPatch) -> None:
    listeners: list[tuple[object, str]] = []
    fake_engine = FakeEngine()

    def fake_listens_for(target, identifier):
        def _decorator(fn):
            listeners.append((target, identifier))
            return fn

        return _decorator

    monkeypatch.setattr(session_module, "get_config", lambda: _database_config(DRIVER="sqlite", ECHO=False))
    monkeypatch.setattr(session_module, "create_async_engine", lambda url, **kwargs: fake_engine)
    monkeypatch.setattr(session_module.event, "listens_for", fake_listens_for)

    assert session_module.get_engine() is fake_engine
    assert listeners == [(fake_engine.sync_engine, "connect")]


@pytest.mark.asyncio
async def test_close_engine_disposes_cached_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_engine = FakeEngine()
    monkeypatch.setattr(session_module, "get_engine", lambda: fake_engine)

    await session_module.close_engine()

    assert fake_engine.disposed is True


@pytest.mark.asyncio
async def test_ping_database_runs_against_sqlite(sqlite_engine) -> None:
    await session_module.ping_database(sqlite_engine)


@pytest.mark.asyncio
async def test_create_database_schema_creates_every_table(sqlite_engine) -> None:
    await session_module.create_database_schema(sqlite_engine)

    async with sqlite_engine.connect() as connection:
        tables = await connection.run_sync(lambda sync_connection: inspect(sync_connection).get_table_names())

    assert {"sites", "content", "products", "site_health_checks"} <= set(tables)
