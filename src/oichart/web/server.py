"""Web front end: Chart.js page, a JSON polling API and PNG snapshots."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from importlib import resources

from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse, Response

from oichart.app import ChartApp
from oichart.constants import APP_NAME
from oichart.core.frame import build_frame
from oichart.core.window import overview_window
from oichart.exceptions import FetchError, InvalidIdentifierError, NoDataError
from oichart.web.png_chart import render_png
from oichart.web.serialization import encode_payload, error_payload, frame_payload

logger = logging.getLogger(__name__)


def _json(payload: dict, status_code: int = 200) -> Response:
    return Response(content=encode_payload(payload), status_code=status_code, media_type="application/json")


def load_index_html() -> str:
    return resources.files("oichart.web").joinpath("templates/index.html").read_text(encoding="utf-8")


def create_app(chart: ChartApp, start_updater: bool = True) -> FastAPI:
    """
    Build the FastAPI application around an initialized ChartApp.

    Args:
        chart: App whose refresh loop has been initialized.
        start_updater: Run the window update loop on a background thread
            for the lifetime of the server.
    """
    if chart.loop is None:
        raise ValueError("ChartApp must be initialized before creating the web app")
    loop = chart.loop
    web = chart.config.web

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        stop_event = None
        if start_updater:
            _, stop_event = loop.start_background(web.interval_seconds)
        try:
            yield
        finally:
            if stop_event is not None:
                stop_event.set()

    app = FastAPI(title=APP_NAME, lifespan=lifespan)
    index_html = load_index_html()

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return index_html

    @app.get("/data")
    def read_data(
        table: str | None = Query(default=None),
        symbol: str | None = Query(default=None),
    ) -> Response:
        if table and symbol:
            try:
                chart.switch_source(table, symbol)
            except InvalidIdentifierError as exc:
                return _json(error_payload(str(exc)), status_code=400)
            except NoDataError:
                return _json(
                    error_payload(f"No data found in table {table} for symbol = {symbol}"),
                    status_code=404,
                )
            except FetchError as exc:
                return _json(error_payload(f"Query failed: {exc}"), status_code=502)

        frame = loop.current_frame()
        if frame is None:
            return _json(error_payload("No data available"))
        return _json(frame_payload(frame))

    @app.get("/overview")
    def read_overview() -> Response:
        records, length = chart.store.snapshot()
        if length < 2:
            return _json(error_payload("No data available"))
        window = overview_window(records, web.sample_size)
        logger.debug(f"Sampled {len(window)} records from {length} total records")
        return _json(frame_payload(build_frame(window)))

    @app.get("/chart")
    def read_chart(view: str = Query(default="window")) -> Response:
        if view == "overview":
            records, length = chart.store.snapshot()
            frame = build_frame(overview_window(records, web.sample_size)) if length >= 2 else None
        elif view == "window":
            frame = loop.current_frame()
        else:
            return _json(error_payload(f"Unknown view: {view}"), status_code=400)

        if frame is None or not frame.window.is_drawable:
            return _json(error_payload("Insufficient data"), status_code=503)
        return Response(content=render_png(frame), media_type="image/png")

    @app.get("/tables")
    def read_tables() -> Response:
        try:
            tables = chart.client.list_tables()
        except FetchError as exc:
            return _json(error_payload(f"Failed to list tables: {exc}"), status_code=502)
        if web.allowed_tables:
            tables = [t for t in tables if t in web.allowed_tables]
        return _json({"tables": tables})

    @app.get("/symbols")
    def read_symbols(table: str | None = Query(default=None)) -> Response:
        if not table:
            return _json(error_payload("Missing table parameter"), status_code=400)
        try:
            chart.client.ensure_table(table, web.allowed_tables)
            symbols = chart.client.list_symbols(table)
        except InvalidIdentifierError as exc:
            return _json(error_payload(str(exc)), status_code=400)
        except FetchError as exc:
            return _json(error_payload(f"Failed to list symbols: {exc}"), status_code=502)
        return _json({"table": table, "symbols": symbols})

    return app


def serve(chart: ChartApp) -> None:
    """Run the web app with uvicorn until interrupted."""
    import uvicorn

    web = chart.config.web
    app = create_app(chart)
    logger.info(f"Starting web server at http://{web.host}:{web.port}")
    uvicorn.run(app, host=web.host, port=web.port, log_level=chart.config.environment.log_level.value.lower())
