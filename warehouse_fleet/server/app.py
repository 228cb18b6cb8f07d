"""FastAPI application exposing fleet control services."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from warehouse_fleet.enterprise.config.settings import get_settings
from warehouse_fleet.observability import bind_global_context, configure_logging, configure_tracer, flush_traces
from warehouse_fleet.observability.metrics import REQUEST_COUNTER
from warehouse_fleet.persistence import dispose_engine
from warehouse_fleet.server.api.routers import (
	bins_router,
	fleet_router,
	health_router,
	observability_router,
	packages_router,
	robots_router,
)
from warehouse_fleet.server.dependencies import prepare_store, shutdown_fleet_controller

settings = get_settings()
configure_logging(settings.logging)
configure_tracer("warehouse-fleet-api", settings.telemetry, settings.environment)
bind_global_context(service="warehouse-fleet-api", environment=settings.environment)


@asynccontextmanager
async def lifespan(_app: FastAPI):
	await prepare_store()
	yield
	await shutdown_fleet_controller()
	await dispose_engine()
	flush_traces()


app = FastAPI(title="Warehouse Fleet API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

FastAPIInstrumentor.instrument_app(app)


@app.middleware("http")
async def count_requests(request: Request, call_next):
	REQUEST_COUNTER.inc()
	response = await call_next(request)
	return response


app.include_router(health_router, prefix="/api/v1")
app.include_router(fleet_router, prefix="/api/v1")
app.include_router(robots_router, prefix="/api/v1")
app.include_router(packages_router, prefix="/api/v1")
app.include_router(bins_router, prefix="/api/v1")
app.include_router(observability_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
	return {"message": "Warehouse Fleet API"}
