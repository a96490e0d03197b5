"""HTTP entry point serving chart datasets.

``GET /graph/<type>[/<name>]/<property>?end=...&duration=...&scope=...``
answers with the per-host series of one resource property as JSON.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse

from . import __version__
from .config import StatGraphConfig
from .errors import ResourcePathError, TopologyError
from .resources import parse_resource_path
from .series.aggregator import SeriesAggregator, build_aggregator
from .series.dataset import dataset_to_dict
from .series.model import Scope, TimeWindow, parse_datetime

logger = logging.getLogger(__name__)

_NO_CACHE_HEADERS = {
    "Pragma": "no-cache",
    "Cache-Control": "no-cache",
    "Expires": "Thu, 01 Jan 1970 00:00:00 GMT",
}


def create_app(config: StatGraphConfig, *, aggregator: SeriesAggregator | None = None) -> FastAPI:
    """Create the FastAPI application."""
    if aggregator is None:
        aggregator = build_aggregator(config)

    app = FastAPI(title="statgraph", version=__version__)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.get("/graph/{resource_path:path}")
    def graph(
        resource_path: str,
        end: str | None = Query(default=None),
        duration: int | None = Query(default=None),
        scope: str | None = Query(default=None),
    ) -> JSONResponse:
        try:
            ref = parse_resource_path(resource_path)
        except ResourcePathError as exc:
            raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

        try:
            end_time = parse_datetime(end) if end else datetime.now().replace(microsecond=0)
            minutes = config.query.default_duration_minutes if duration is None else duration
            window = TimeWindow.ending_at(end_time, minutes)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

        try:
            dataset = aggregator.dataset(ref, window, Scope.parse(scope or config.query.default_scope))
        except TopologyError as exc:
            logger.error("Error querying the management endpoint for live hosts: %s", exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

        return JSONResponse(content=dataset_to_dict(dataset), headers=_NO_CACHE_HEADERS)

    return app
