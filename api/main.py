# api/main.py
# FastAPI app for the Clipbook Dialer bookmarklet.
# - POST /api/calls          log a finished call to HubSpot
# - GET  /api/calls/history  newest HubSpot call for a phone number
# - GET  /api/calls/log      the dialer's own call log (last 100)
# - GET  /api/health         liveness
# Errors: missing phone -> 400, HubSpot non-2xx -> 502 with details, anything else -> opaque 500.

import os
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from clipbook.calls import CallEvent, CallRecordService
from clipbook.config import Settings, settings as default_settings
from clipbook.errors import RemoteApiError, ValidationError
from clipbook.hubspot.client import HubSpotClient
from clipbook.logging_setup import configure_logging, get_logger
from clipbook.observability import REQUEST_COUNT, REQUEST_LATENCY, configure_tracer, metrics_app
from clipbook.utils import utc_now_iso

APP_NAME = "Clipbook Dialer API"
# metrics label for 404s and mounted sub-apps (static files, /metrics)
UNMATCHED_ENDPOINT = "unmatched"

log = get_logger("api")


class CallIn(BaseModel):
    # phone is checked by the service so the 400 message matches the other endpoints
    phone: Optional[str] = None
    name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    disposition: Optional[str] = None
    notes: Optional[str] = None
    duration: Optional[int] = Field(default=0, ge=0, description="Seconds")
    linkedin: Optional[str] = None


class CallOut(BaseModel):
    success: bool = True
    hubspotCallId: str
    contactId: Optional[str] = None


def _internal_error(route: str) -> JSONResponse:
    log.exception("request_failed", route=route)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the app around one Settings object.
    `transport` replaces the real network for HubSpot (tests pass httpx.MockTransport).
    """
    settings = settings or default_settings
    configure_logging(settings)
    configure_tracer(settings)

    hubspot = HubSpotClient(settings, transport=transport)
    calls = CallRecordService(hubspot, redact_pii=settings.PII_REDACTION_ENABLED)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.check_startup(log)
        log.info("server_started", service=settings.SERVICE_NAME, port=settings.PORT)
        yield

    app = FastAPI(title=APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.calls = calls

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.CORS_ALLOW_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def record_metrics(request: Request, call_next):
        t0 = time.perf_counter()
        response = await call_next(request)
        # route template, never the raw path: one series per route, not per URL
        endpoint = getattr(request.scope.get("route"), "path", UNMATCHED_ENDPOINT)
        REQUEST_COUNT.labels(endpoint=endpoint, method=request.method, status=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint, method=request.method).observe(time.perf_counter() - t0)
        return response

    @app.exception_handler(ValidationError)
    async def on_validation_error(request: Request, exc: ValidationError):
        log.warning("request_rejected", route=request.url.path, method=request.method, error=str(exc))
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RemoteApiError)
    async def on_remote_error(request: Request, exc: RemoteApiError):
        log.warning(
            "hubspot_rejected",
            route=request.url.path,
            method=request.method,
            operation=exc.operation,
            status=exc.status_code,
        )
        # details are for humans debugging; callers only rely on the status
        return JSONResponse(
            status_code=502,
            content={"error": "HubSpot API error", "status": exc.status_code, "details": exc.payload},
        )

    @app.get("/api/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "timestamp": utc_now_iso()}

    @app.post("/api/calls", response_model=CallOut)
    async def log_call(payload: CallIn):
        try:
            logged = await calls.log_call(CallEvent(**payload.model_dump()))
        except (ValidationError, RemoteApiError):
            raise
        except Exception:
            return _internal_error("POST /api/calls")
        return CallOut(hubspotCallId=logged.remote_call_id, contactId=logged.contact_id)

    @app.get("/api/calls/history")
    async def call_history(phone: Optional[str] = None) -> Dict[str, Any]:
        try:
            last = await calls.get_last_call_for_phone(phone)
        except (ValidationError, RemoteApiError):
            raise
        except Exception:
            return _internal_error("GET /api/calls/history")
        if not last.found:
            return {"found": False}
        return {
            "found": True,
            "callId": last.call_id,
            "status": last.status,
            "title": last.title,
            "body": last.body,
            "date": last.date,
            "duration": last.duration,
        }

    @app.get("/api/calls/log")
    async def call_log() -> Dict[str, Any]:
        try:
            entries = await calls.list_call_log()
        except (ValidationError, RemoteApiError):
            raise
        except Exception:
            return _internal_error("GET /api/calls/log")
        return {
            "calls": [
                {
                    "id": e.id,
                    "name": e.name,
                    "phone": e.phone,
                    "company": e.company,
                    "title": e.title,
                    "linkedin": e.linkedin,
                    "disp": e.disp,
                    "notes": e.notes,
                    "duration": e.duration,
                    "date": e.date,
                }
                for e in entries
            ]
        }

    app.mount("/metrics", metrics_app)

    # Static bookmarklet assets last, so /api/* and /metrics win
    if os.path.isdir(settings.STATIC_DIR):
        app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")

    return app


app = create_app()
