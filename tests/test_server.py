import pytest
from fastmcp import Client

from menusync.config import DatabaseConfig, ImporterConfig, Settings
from menusync.exceptions import ConfigError
from menusync.mcp import server


def make_settings(**importer: object) -> Settings:
    return Settings(
        database=DatabaseConfig(url="sqlite://"),
        importer=ImporterConfig(**importer),  # type: ignore[arg-type]
    )


def test_app_state_builds_importer_and_tables() -> None:
    state = server.AppState(make_settings(timeout=5.0))
    state.init_services()

    assert state.session_factory is not None
    assert state.importer is not None
    assert state.schedule_configured_import() is None
    assert state.scheduler.job_ids() == []


def test_app_state_registers_configured_import() -> None:
    endpoint = "https://cms.example.com/jsonapi/menu_items/main"
    state = server.AppState(make_settings(endpoint=endpoint, schedule_minutes=10))
    state.init_services()

    job_id = state.schedule_configured_import()

    assert job_id == f"menu-import:{endpoint}"
    assert state.scheduler.job_ids() == [job_id]


@pytest.mark.asyncio
async def test_lifespan_starts_and_stops_scheduler(monkeypatch: pytest.MonkeyPatch) -> None:
    endpoint = "https://cms.example.com/jsonapi/menu_items/main"
    state = server.AppState(make_settings(endpoint=endpoint, schedule_minutes=10))
    state.init_services()
    state.schedule_configured_import()
    monkeypatch.setattr(server, "_state", state)

    async with server._lifespan(server.mcp):
        assert state.scheduler.started is True

    assert state.scheduler.started is False


@pytest.mark.asyncio
async def test_health_tool() -> None:
    client = Client(server.mcp)
    async with client:
        res = await client.call_tool("health", {})
    content = getattr(res, "content", res)
    texts = [getattr(item, "text", None) for item in content]
    assert "ok" in texts


def test_app_state_rejects_unsupported_database_url() -> None:
    settings = Settings(database=DatabaseConfig(url="mysql://user:pw@localhost/menus"))
    state = server.AppState(settings)

    with pytest.raises(ConfigError):
        state.init_services()
    assert state.importer is None
