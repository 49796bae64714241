"""FastAPI Matomo collector service.

Accepts analytics events via HTTP, validates them against the schema,
and returns the Matomo tracking request the host should send. Nothing
is sent or stored here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.collector.schemas import CollectRequest, OutboundRequest
from src.matomo import component
from src.matomo.errors import ConfigurationError, EventKindMismatch
from src.matomo.settings import env_defaults

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load default settings from the environment on startup."""
    app.state.default_settings = env_defaults()
    yield


app = FastAPI(
    title="Matomo Event Collector",
    description="Turns page, track and user events into Matomo tracking API requests.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ConfigurationError)
async def configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.warning("rejecting %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(EventKindMismatch)
async def kind_mismatch(request: Request, exc: EventKindMismatch) -> JSONResponse:
    logger.warning("rejecting %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _settings_for(body: CollectRequest) -> dict[str, str]:
    return {**app.state.default_settings, **body.settings}


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/page", response_model=OutboundRequest)
def page(body: CollectRequest) -> OutboundRequest:
    return component.page(body.event, _settings_for(body))


@app.post("/track", response_model=OutboundRequest)
def track(body: CollectRequest) -> OutboundRequest:
    return component.track(body.event, _settings_for(body))


@app.post("/user", response_model=OutboundRequest)
def user(body: CollectRequest) -> OutboundRequest:
    return component.user(body.event, _settings_for(body))


@app.post("/collect", response_model=OutboundRequest)
def collect(body: CollectRequest) -> OutboundRequest:
    """Convenience endpoint that dispatches on the event's own kind."""
    handler = component.HANDLERS[body.event.event_type]
    return handler(body.event, _settings_for(body))
