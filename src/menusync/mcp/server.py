"""menusync MCP server entrypoint using FastMCP.

Exposes menu import tools built atop the JSON:API connector and local storage.
Run with:
  - menusync-mcp
  - or: python -m menusync.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

from fastmcp import FastMCP
from loguru import logger
from sqlalchemy.orm import Session, sessionmaker

from menusync.config import Settings, load_settings
from menusync.connectors.jsonapi import JsonApiMenuConnector
from menusync.connectors.scheduler import ImportScheduler
from menusync.exceptions import ConfigError
from menusync.logging_setup import configure_logging
from menusync.mcp.tools import register_menu_tools
from menusync.storage.database import get_engine, init_db, make_session_factory
from menusync.sync.importer import MenuImporter


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.session_factory: Optional[sessionmaker[Session]] = None
        self.importer: Optional[MenuImporter] = None
        self.scheduler = ImportScheduler()

    def init_services(self) -> None:
        """Initialize storage and the importer from configuration."""
        db = self.settings.database
        try:
            engine = get_engine(db.url, echo=db.echo)
        except ValueError as exc:
            raise ConfigError(f"Invalid MENUSYNC_DATABASE__URL: {exc}") from exc
        init_db(engine)
        self.session_factory = make_session_factory(engine)
        icfg = self.settings.importer
        connector = JsonApiMenuConnector(timeout=icfg.timeout, verify_ssl=icfg.verify_ssl)
        self.importer = MenuImporter(connector, self.session_factory)

    def schedule_configured_import(self) -> Optional[str]:
        """Register the import configured in settings, if any.

        The job only runs once the scheduler is started inside the server loop.
        """
        icfg = self.settings.importer
        if not (self.importer and icfg.endpoint and icfg.schedule_minutes):
            return None
        return self.scheduler.schedule_import(
            self.importer,
            icfg.endpoint,
            collection_name=icfg.collection_name,
            interval=timedelta(minutes=icfg.schedule_minutes),
        )


# Global state and server instance
_state: Optional[AppState] = None


@asynccontextmanager
async def _lifespan(server: FastMCP) -> AsyncIterator[None]:
    # AsyncIOScheduler binds to the loop that is running when it starts
    if _state is not None and _state.scheduler.job_ids():
        _state.scheduler.start()
    try:
        yield
    finally:
        if _state is not None:
            _state.scheduler.shutdown(wait=False)


mcp = FastMCP("menusync MCP Server", lifespan=_lifespan)


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    configure_logging(settings.app.log_level)
    _state = AppState(settings)
    _state.init_services()
    job_id = _state.schedule_configured_import()
    if job_id:
        logger.bind(component="server").info("Configured import job {} registered", job_id)
    # Register tools
    register_menu_tools(mcp, get_state=lambda: _state)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
