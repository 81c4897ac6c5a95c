"""
FastAPI table browser service.

Exposes the live MySQL schema and row data for internal tooling:
- Table and column listing
- Distinct values of a column
- Row counts
- Filtered row queries with optional column projection

Every request re-validates identifiers against the live schema.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from browser import QueryRequest, TableBrowser
from config import AppConfig
from database import ConnectionManager
from errors import BrowserError, DatabaseFault

logger = logging.getLogger(__name__)


def build_browser(config: AppConfig) -> TableBrowser:
    """Create the pool and check that the database answers."""
    manager = ConnectionManager(config.database)
    success, message = manager.test_connection()
    if not success:
        manager.close()
        raise RuntimeError(f"Database connection test failed: {message}")
    logger.info("Successfully connected to database")
    return TableBrowser(manager)


def get_browser(request: Request) -> TableBrowser:
    return request.app.state.browser


def create_app(config: Optional[AppConfig] = None, browser: Optional[TableBrowser] = None) -> FastAPI:
    """
    Build the application.

    Args:
        config: Process configuration, read from the environment if not provided
        browser: Pre-built service (tests inject one); built at startup otherwise
    """
    config = config or AppConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_browser = app.state.browser is None
        if owns_browser:
            app.state.browser = build_browser(config)
        try:
            yield
        finally:
            if owns_browser:
                app.state.browser.manager.close()
                app.state.browser = None

    app = FastAPI(title="Table Browser", version="1.0.0", lifespan=lifespan)
    app.state.browser = browser

    @app.exception_handler(BrowserError)
    async def browser_error_handler(request: Request, exc: BrowserError):
        if isinstance(exc, DatabaseFault):
            logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Internal error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": "An internal error occurred"},
        )

    # ---------------------- ENDPOINTS ----------------------

    @app.get("/health")
    def health(request: Request):
        return get_browser(request).health()

    @app.get("/tables")
    def list_tables(request: Request):
        return get_browser(request).list_tables()

    @app.get("/tables/{table}/columns")
    def table_columns(request: Request, table: str):
        return get_browser(request).table_columns(table)

    @app.get("/tables/{table}/columns/{column}/values")
    def column_distinct_values(request: Request, table: str, column: str, limit: Optional[str] = None):
        return get_browser(request).distinct_values(table, column, limit)

    @app.get("/tables/{table}/count")
    def table_row_count(request: Request, table: str):
        return get_browser(request).row_count(table)

    @app.get("/query/{table}")
    def query_table(
        request: Request,
        table: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        columns: Optional[str] = None,
        limit: Optional[str] = None,
    ):
        query_request = QueryRequest.from_params(
            table, field=field, value=value, columns=columns, limit=limit
        )
        return get_browser(request).query(query_request)

    return app
