# safewatch/main.py
import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

import uvicorn

from safewatch.common.errors import MissingLocationError, UnknownScenarioError
from safewatch.common.timeutil import utcnow
from safewatch.core.models import ErrorResult
from safewatch.core.scenarios import available_scenarios, build_override
from safewatch.observability.health import create_app
from safewatch.observability.logging_setup import setup_logging, get_logger
from safewatch.orchestrators.services import Services, build_services
from safewatch.settings import Settings

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings.load(os.getenv("SAFEWATCH_CONFIG"))
    s.dry_run = _b("DRY_RUN", s.dry_run)

    # self location
    if os.getenv("SELF_LAT") and os.getenv("SELF_LON"):
        s.location.self_lat = float(os.environ["SELF_LAT"])
        s.location.self_lon = float(os.environ["SELF_LON"])

    # monitoring
    if os.getenv("LOCATION_KEYWORDS"):
        s.monitoring.location_keywords = [k.strip() for k in os.environ["LOCATION_KEYWORDS"].split(",") if k.strip()]
    if os.getenv("NEWS_FEEDS"):
        s.monitoring.news_feeds = [f.strip() for f in os.environ["NEWS_FEEDS"].split(",") if f.strip()]
    s.monitoring.earthquake_radius_km = float(os.getenv("EARTHQUAKE_RADIUS_KM", s.monitoring.earthquake_radius_km))

    # escalation
    s.escalation.threshold_minutes = float(os.getenv("ESCALATION_MINUTES", s.escalation.threshold_minutes))
    s.escalation.contact.name = os.getenv("EMERGENCY_CONTACT_NAME", s.escalation.contact.name)
    s.escalation.contact.email = os.getenv("EMERGENCY_CONTACT_EMAIL", s.escalation.contact.email)
    s.escalation.contact.phone = os.getenv("EMERGENCY_CONTACT_PHONE", s.escalation.contact.phone)

    # feeds
    s.feeds.timeout_sec = float(os.getenv("FEED_TIMEOUT_SEC", s.feeds.timeout_sec))
    s.feeds.max_retries = int(os.getenv("FEED_MAX_RETRIES", s.feeds.max_retries))

    # storage
    s.storage.state_dir = os.getenv("SAFEWATCH_STATE_DIR", s.storage.state_dir)
    s.storage.logs_dir = os.getenv("SAFEWATCH_LOGS_DIR", s.storage.logs_dir)
    s.storage.report_log = os.getenv("REPORT_LOG", s.storage.report_log)
    s.storage.sqlite_path = os.getenv("REPORT_DB_PATH", s.storage.sqlite_path)

    # observability / webhook
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("PORT", s.observability.http_port))
    s.webhook.secret_key = os.getenv("SECRET_KEY", s.webhook.secret_key)

    return s

def _emit(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))

async def cmd_check(services: Services, args) -> int:
    try:
        report = await services.safety.run_check()
    except MissingLocationError as e:
        _emit(ErrorResult(error=e.message).model_dump(mode="json"))
        return 1
    if not args.no_alert and not services.settings.dry_run:
        await services.lifecycle.record_report(report)
    _emit(report.model_dump(mode="json"))
    return 0

async def cmd_self_check(services: Services, args) -> int:
    location = services.self_location()
    if location is None:
        _emit(ErrorResult(error="No location configured for self").model_dump(mode="json"))
        return 1
    report = await services.self_check.run_check(location)
    _emit(report.model_dump(mode="json"))
    return 0

async def cmd_escalation(services: Services, args) -> int:
    decision = await services.lifecycle.check_escalation()
    _emit(decision.model_dump(mode="json", exclude_none=True))
    if args.mark_sent and decision.action == "escalate":
        await services.lifecycle.mark_escalated()
    return 0

async def cmd_ack(services: Services, args) -> int:
    pending = await services.lifecycle.acknowledge()
    if pending is None:
        _emit({"acknowledged": False, "reason": "no pending alert"})
    else:
        _emit({"acknowledged": True, "alert": pending.model_dump(mode="json")})
    return 0

async def cmd_raise(services: Services, args) -> int:
    pending = await services.lifecycle.raise_manual(args.summary)
    _emit(pending.model_dump(mode="json"))
    return 0

async def cmd_scenario(services: Services, args) -> int:
    if args.name == "clear":
        cleared = await services.store.clear_override()
        _emit({"cleared": cleared})
        return 0
    try:
        override = build_override(args.name, utcnow())
    except UnknownScenarioError as e:
        _emit({"error": e.message, "available": available_scenarios() + ["clear"]})
        return 1
    await services.store.save_override(override)
    _emit({"scenario": override.scenario, "expires_at": override.expires_at.isoformat()})
    return 0

COMMANDS = {
    "check": cmd_check,
    "self-check": cmd_self_check,
    "escalation": cmd_escalation,
    "ack": cmd_ack,
    "raise": cmd_raise,
    "scenario": cmd_scenario,
}

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="safewatch", description="Personal hazard monitoring loop")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("check", help="run the safety check for the stored location")
    p.add_argument("--no-alert", action="store_true", help="do not raise a pending alert")

    sub.add_parser("self-check", help="check the health of this host and its surroundings")

    p = sub.add_parser("escalation", help="poll the escalation decision")
    p.add_argument("--mark-sent", action="store_true", help="clear the alert after an escalate decision")

    sub.add_parser("ack", help="acknowledge the pending alert")

    p = sub.add_parser("raise", help="raise a pending alert manually")
    p.add_argument("summary")

    p = sub.add_parser("scenario", help="inject a test scenario or 'clear'")
    p.add_argument("name", help=", ".join(available_scenarios() + ["clear"]))

    p = sub.add_parser("serve", help="run the HTTP service")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=None)
    return parser

def serve(settings: Settings, host: str, port: Optional[int]) -> None:
    app = create_app(settings)
    uvicorn.run(app, host=host, port=port or settings.observability.http_port,
                log_level=settings.observability.log_level.lower())

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    s = build_settings()
    setup_logging(s.observability.log_level, colorize=sys.stderr.isatty())
    log = get_logger()
    log.debug("settings loaded", command=args.command)

    if args.command == "serve":
        serve(s, args.host, args.port)
        return 0

    services = build_services(s)
    return asyncio.run(COMMANDS[args.command](services, args))

if __name__ == "__main__":
    sys.exit(main())
