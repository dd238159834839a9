"""NagarSeva FastAPI application entry point.

Creates the FastAPI app, configures middleware, includes routers, and
manages the lifecycle of all backend services (record store, LLM,
response generator, domain services, chat orchestrator, notification
poller).
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from config.settings import settings
from src.api.router import api_router
from src.middleware.rate_limit import RateLimitMiddleware

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Structured logging configuration
# ---------------------------------------------------------------------------


def _configure_logging() -> None:
    """Set up structlog with JSON or console rendering based on settings."""
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            structlog.processors.NAME_TO_LEVEL[settings.log_level.lower()],
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup and shutdown of all NagarSeva services.

    On startup:
      1. Create the record store and seed demo data
      2. Initialise the LLM (only when a GCP project is configured)
      3. Build the response generator, domain services and orchestrator
      4. Start the notification poller
      5. Store everything on ``app.state``

    On shutdown:
      - Stop the notification poller.
      - Close the record store.
    """
    _configure_logging()
    logger.info(
        "app.startup",
        env=settings.env,
        store_backend=settings.store_backend,
        gcp_project=settings.gcp_project_id or None,
        region=settings.gcp_region,
    )

    app.state.start_time = time.time()

    # -- 1. Record store ----------------------------------------------------
    from src.services.store import create_store

    store = create_store(settings.store_backend, settings.redis_url)
    app.state.store = store

    if settings.seed_demo_data:
        from src.data.seed import seed_demo_data

        try:
            await seed_demo_data(store, demo_citizen_id=settings.demo_citizen_id)
        except Exception:
            logger.error("app.seed_failed", exc_info=True)

    # -- 2. LLM service (Vertex AI / Gemini) --------------------------------
    from src.services.llm import LLMService

    llm: LLMService | None = None
    if settings.llm_enabled:
        try:
            llm = LLMService(
                project_id=settings.gcp_project_id,
                region=settings.vertex_ai_location,
                model_name=settings.vertex_ai_model,
                temperature=settings.llm_temperature,
            )
            logger.info("app.llm_initialised", model=settings.vertex_ai_model)
        except Exception:
            logger.warning("app.llm_init_failed", exc_info=True)
    else:
        logger.info("app.llm_disabled", reason="GCP_PROJECT_ID not set; using keyword fallback")
    app.state.llm = llm

    # -- 3. Response generator and domain services --------------------------
    from src.pipeline.actions import ActionExecutor
    from src.pipeline.orchestrator import ChatOrchestrator
    from src.services.admin import AdminService
    from src.services.applications import ApplicationService
    from src.services.bills import BillService
    from src.services.grievances import GrievanceService
    from src.services.notifications import NotificationPoller, NotificationService
    from src.services.response_generator import ResponseGenerator
    from src.services.sessions import SessionStore

    generator = ResponseGenerator(llm, history_window=settings.history_window)
    app.state.response_generator = generator

    grievances = GrievanceService(
        store,
        sla_days=settings.grievance_sla_days,
        default_citizen_id=settings.demo_citizen_id,
    )
    applications = ApplicationService(
        store,
        sla_days=settings.application_sla_days,
        default_citizen_id=settings.demo_citizen_id,
    )
    bills = BillService(store)
    executor = ActionExecutor(
        grievances,
        applications,
        bills,
        payment_base_url=settings.payment_gateway_url,
    )

    app.state.grievance_service = grievances
    app.state.application_service = applications
    app.state.bill_service = bills
    app.state.admin_service = AdminService(store)
    app.state.orchestrator = ChatOrchestrator(generator, executor)

    sessions = SessionStore(ttl_seconds=settings.session_ttl_seconds)
    app.state.sessions = sessions

    # -- 4. Notifications ---------------------------------------------------
    notification_service = NotificationService(store)
    app.state.notification_service = notification_service

    poller = NotificationPoller(
        notification_service,
        sessions,
        interval_seconds=settings.notification_poll_interval_seconds,
    )
    app.state.notification_poller = poller
    if settings.enable_notification_poller:
        poller.start()
    else:
        logger.info("app.notification_poller_disabled")

    logger.info("app.startup_complete", llm_enabled=generator.llm_enabled)

    yield

    # -- Shutdown -----------------------------------------------------------
    logger.info("app.shutdown_start")
    await poller.stop()
    await store.close()
    logger.info("app.shutdown_complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="NagarSeva API",
    description=(
        f"NagarSeva: WhatsApp-style citizen services chatbot and admin triage API "
        f"for the {settings.corporation_name}. Grievances, bills, certificates, "
        "licenses and status tracking in English, Hindi and Hinglish."
    ),
    version="0.1.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# -- CORS middleware --------------------------------------------------------
# allow_credentials=True must not be combined with allow_origins=["*"].
if settings.is_production:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Admin-API-Key"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:8000"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS", "HEAD"],
        allow_headers=["Content-Type", "Accept", "Authorization", "X-Admin-API-Key"],
    )

# -- Custom middleware ------------------------------------------------------
app.add_middleware(
    RateLimitMiddleware,
    max_requests_per_minute=settings.rate_limit_per_minute,
    trusted_proxy_count=settings.trusted_proxy_count,
)

# -- Prometheus metrics -----------------------------------------------------
try:
    from prometheus_fastapi_instrumentator import Instrumentator

    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/api/v1/health"],
    ).instrument(app).expose(
        app,
        endpoint="/metrics",
        include_in_schema=not settings.is_production,
    )
    logger.info("app.prometheus_metrics_enabled")
except ImportError:
    logger.warning("app.prometheus_not_available")

# -- Include routers -------------------------------------------------------
app.include_router(api_router)


@app.get("/api", response_class=ORJSONResponse)
async def api_info() -> dict:
    """API information endpoint."""
    return {
        "name": "NagarSeva API",
        "description": f"Citizen services chatbot for the {settings.corporation_name}",
        "version": app.version,
        "docs": "/docs",
        "health": "/api/v1/health",
        "languages_supported": ["en", "hi", "hinglish"],
        "endpoints": {
            "chat": "/api/v1/chat/sessions",
            "notifications": "/api/v1/notifications/unread",
            "admin_requests": "/api/v1/admin/requests",
            "admin_stats": "/api/v1/admin/stats",
            "admin_notifications": "/api/v1/admin/notifications",
            "health": "/api/v1/health",
        },
    }


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
