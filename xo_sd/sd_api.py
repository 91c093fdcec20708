"""Prometheus HTTP SD API using FastAPI."""
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, JSONResponse
from jinja2 import Template
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time

from xo_sd.config import LOG_LEVELS
from xo_sd.discovery import TargetDiscovery
from xo_sd.registry import list_jobs, lookup
from xo_sd.xo_client import DirectoryError

logger = logging.getLogger(__name__)

TARGET_LIST_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Prometheus HTTP SD targets</title>
</head>
<body>
  <h1>Available jobs</h1>
  {% if jobs %}
  <ul>
    {% for job in jobs %}
    <li><a href="/targets/{{ job | urlencode }}">{{ job }}</a></li>
    {% endfor %}
  </ul>
  {% else %}
  <p>No VM carries a discovery tag.</p>
  {% endif %}
</body>
</html>
"""


class LogLevelRequest(BaseModel):
    """Request to change log level."""
    level: str


class SdAPI:
    """FastAPI application serving Prometheus HTTP SD targets per job."""

    def __init__(self, discovery: TargetDiscovery):
        """
        Initialize SD API.

        Args:
            discovery: Pipeline building the target registry on each request
        """
        self.discovery = discovery
        self.app = FastAPI(title="XO Prometheus HTTP SD")
        self.template = Template(TARGET_LIST_TEMPLATE, autoescape=True)

        if discovery.self_metrics is not None:
            self.metrics_registry = discovery.self_metrics.registry
        else:
            self.metrics_registry = CollectorRegistry()

        # Setup routes
        self._setup_routes()

    async def _build(self):
        try:
            return await self.discovery.build()
        except DirectoryError as e:
            raise HTTPException(status_code=502, detail=f"Failed to list VMs: {e}")

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/healthz")
        async def healthz():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": time.time()}

        @self.app.get("/targets/{job_name:path}")
        async def get_sd_targets(job_name: str):
            """Targets of a job in Prometheus HTTP SD format."""
            endpoints = await self._build()

            logger.info(f"Requesting targets for job: {job_name}")
            return [target.to_dict() for target in lookup(endpoints, job_name)]

        @self.app.get("/metrics")
        async def metrics():
            """Self-monitoring metrics."""
            return Response(
                content=generate_latest(self.metrics_registry),
                media_type=CONTENT_TYPE_LATEST
            )

        @self.app.post("/control/loglevel")
        async def set_log_level(request: LogLevelRequest):
            """Change log level at runtime."""
            level = request.level.upper()

            if level not in LOG_LEVELS:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid log level: {level}"
                )

            logging.getLogger().setLevel(getattr(logging, level))
            logger.info(f"Log level changed to: {level}")

            return {
                "status": "log_level_changed",
                "level": level,
                "timestamp": time.time()
            }

        @self.app.exception_handler(StarletteHTTPException)
        async def target_list(request: Request, exc: StarletteHTTPException):
            """Render the list of known jobs for any unknown route."""
            if exc.status_code != 404:
                return await http_exception_handler(request, exc)

            try:
                endpoints = await self.discovery.build()
            except DirectoryError as e:
                return JSONResponse(
                    status_code=502,
                    content={"detail": f"Failed to list VMs: {e}"}
                )

            return HTMLResponse(
                content=self.template.render(jobs=sorted(list_jobs(endpoints))),
                status_code=404
            )

    def run(self, host: str = "0.0.0.0", port: int = 8000):
        """Run the API server."""
        import uvicorn
        uvicorn.run(self.app, host=host, port=port, log_level="info")
