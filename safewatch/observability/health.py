"""
HTTP endpoints for SafeWatch.

This module implements the health, info and metrics endpoints plus the
location webhook and the check / escalation / override operations,
all backed by the same Services used by the CLI.
"""

import secrets
import time
from typing import Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from safewatch.common.errors import MissingLocationError, UnknownScenarioError
from safewatch.common.timeutil import utcnow
from safewatch.core.models import ErrorResult, Location
from safewatch.core.scenarios import available_scenarios, build_override
from safewatch.observability import metrics
from safewatch.observability.logging_setup import get_logger
from safewatch.orchestrators.services import Services, build_services
from safewatch.settings import Settings

log = get_logger("safewatch.http")


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(ErrorResult(error=message).model_dump(mode="json"), status_code=status)


def create_app(settings: Settings, services: Optional[Services] = None) -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="SafeWatch hazard monitoring service"
    )

    services = services or build_services(settings)
    secret_key = settings.webhook.secret_key or secrets.token_hex(16)
    if not settings.webhook.secret_key:
        log.warning("no webhook secret configured, generated one for this process", secret_key=secret_key)
    app.state.services = services
    app.state.secret_key = secret_key

    start_time = time.time()

    def require_key(key: Optional[str] = Query(default=None)) -> None:
        if key is None or not secrets.compare_digest(key, secret_key):
            raise HTTPException(status_code=401, detail="unauthorized")

    @app.get("/health")
    async def health():
        """Liveness"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/info")
    async def info():
        """Service information"""
        uptime = time.time() - start_time
        metrics.uptime_seconds.set(uptime)
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "sources": [s.value for s in services.safety.sources],
        })

    @app.get("/metrics")
    async def prometheus_metrics():
        """Prometheus metrics"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.post("/location", dependencies=[Depends(require_key)])
    async def update_location(payload: dict = Body(default={})):
        """Location webhook (OwnTracks, iOS Shortcuts, ...)"""
        # OwnTracks also sends waypoints, dumps, transitions
        msg_type = payload.get("_type")
        if msg_type and msg_type != "location":
            log.info("skipping non-location message", type=msg_type)
            return {"success": True, "skipped": msg_type}

        try:
            location = Location.from_payload(payload, now=utcnow())
        except ValueError as e:
            return JSONResponse({"error": "invalid location", "message": str(e)}, status_code=400)

        await services.store.save_location(location)
        log.info("location updated", lat=location.lat, lon=location.lon)
        return {"success": True, "location": location.model_dump(mode="json")}

    @app.get("/location", dependencies=[Depends(require_key)])
    async def get_location():
        location = await services.store.load_location()
        if location is None:
            return _error(404, "no location data")
        return location.model_dump(mode="json")

    @app.post("/check", dependencies=[Depends(require_key)])
    async def run_check(raise_alert: bool = Query(default=True)):
        """Run the safety check for the stored location"""
        try:
            report = await services.safety.run_check()
        except MissingLocationError as e:
            return _error(404, e.message)
        if raise_alert:
            await services.lifecycle.record_report(report)
        return report.model_dump(mode="json")

    @app.post("/self-check", dependencies=[Depends(require_key)])
    async def run_self_check():
        location = services.self_location()
        if location is None:
            return _error(404, "No location configured for self")
        report = await services.self_check.run_check(location)
        return report.model_dump(mode="json")

    @app.get("/escalation", dependencies=[Depends(require_key)])
    async def escalation():
        """Read-only escalation poll"""
        decision = await services.lifecycle.check_escalation()
        return decision.model_dump(mode="json", exclude_none=True)

    @app.post("/ack", dependencies=[Depends(require_key)])
    async def acknowledge():
        pending = await services.lifecycle.acknowledge()
        if pending is None:
            return {"acknowledged": False, "reason": "no pending alert"}
        return {"acknowledged": True, "alert": pending.model_dump(mode="json")}

    @app.post("/escalation/done", dependencies=[Depends(require_key)])
    async def escalation_done():
        """The caller notified the secondary contact; clear the pending alert if it was due."""
        decision = await services.lifecycle.mark_escalated()
        return {"cleared": decision.action == "escalate", "action": decision.action}

    @app.post("/override", dependencies=[Depends(require_key)])
    async def set_override(payload: dict = Body(default={})):
        scenario = payload.get("scenario", "")
        try:
            override = build_override(scenario, utcnow())
        except UnknownScenarioError as e:
            return JSONResponse({"error": e.message, "available": available_scenarios()}, status_code=400)
        await services.store.save_override(override)
        log.warning("test scenario injected", scenario=scenario, expires_at=override.expires_at.isoformat())
        return {"scenario": scenario, "expires_at": override.expires_at.isoformat()}

    @app.delete("/override", dependencies=[Depends(require_key)])
    async def clear_override():
        return {"cleared": await services.store.clear_override()}

    @app.get("/")
    async def root():
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "info": "/info",
                "metrics": "/metrics",
                "location": "/location?key=",
                "check": "/check?key=",
                "self_check": "/self-check?key=",
                "escalation": "/escalation?key=",
                "ack": "/ack?key=",
                "override": "/override?key=",
            }
        })

    return app
