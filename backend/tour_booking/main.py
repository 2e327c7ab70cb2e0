"""
Tour Booking API - Main Application Entry Point

Backend for a small Marrakech travel agency:
- Activity catalog with a Redis-cached public listing
- Capacity-checked booking admission, serialized per activity and day
- WhatsApp notifications and CRM sync as fire-and-forget side effects
- Admin API with JWT auth, roles and an audit trail
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tour_booking.api.middleware import RequestLoggingMiddleware
from tour_booking.api.router import api_router
from tour_booking.core.config import get_settings
from tour_booking.core.exceptions import register_exception_handlers
from tour_booking.core.limiter import limiter
from tour_booking.core.logging import get_logger, setup_logging
from tour_booking.core.metrics import metrics_endpoint
from tour_booking.db.seed import seed_initial_data
from tour_booking.infrastructure.redis_client import close_redis, get_redis
from tour_booking.infrastructure.twilio_client import TwilioClient
from tour_booking.repositories import build_repository_provider
from tour_booking.services.cache_service import get_cache_stats
from tour_booking.services.crm_service import CrmService, make_crm_handler
from tour_booking.services.events import BookingAdmitted, EventDispatcher
from tour_booking.services.notification_service import (
    NotificationStats,
    WhatsAppNotifier,
    make_notification_handler,
)
from tour_booking.services.strategy_factory import get_admission_strategy

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        storage=settings.STORAGE_BACKEND,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    provider = build_repository_provider(settings)
    await seed_initial_data(provider, settings)

    http = httpx.AsyncClient(timeout=settings.HTTP_CLIENT_TIMEOUT)
    twilio = TwilioClient(
        http,
        account_sid=settings.TWILIO_ACCOUNT_SID,
        auth_token=settings.TWILIO_AUTH_TOKEN,
        from_number=settings.TWILIO_WHATSAPP_FROM,
        base_url=settings.TWILIO_API_BASE_URL,
    )
    notifier = WhatsAppNotifier(
        twilio,
        admin_numbers=settings.ADMIN_WHATSAPP_NUMBERS,
        stats=NotificationStats(list(settings.ADMIN_WHATSAPP_NUMBERS)),
        delay_seconds=settings.NOTIFICATION_DELAY_SECONDS,
        client_delay_seconds=settings.CLIENT_CONFIRMATION_DELAY_SECONDS,
    )
    crm = CrmService.from_settings(settings, http)

    dispatcher = EventDispatcher()
    dispatcher.subscribe(BookingAdmitted, make_notification_handler(notifier))
    dispatcher.subscribe(BookingAdmitted, make_crm_handler(crm, provider))

    app.state.provider = provider
    app.state.admission = get_admission_strategy(settings)
    app.state.dispatcher = dispatcher
    app.state.notifier = notifier
    app.state.crm = crm

    yield

    # Cleanup
    await dispatcher.drain()
    await app.state.admission.close()
    await http.aclose()
    await provider.close()
    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Tour booking API with capacity-checked admission",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

register_exception_handlers(app)

# Rate limiting
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"message": "Too many requests, please try again later."},
    )


app.add_middleware(SlowAPIMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


@app.get("/health", tags=["Health"])
@limiter.exempt
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "admission_strategy": settings.ADMISSION_STRATEGY,
        "cache": cache_stats,
    }


@app.get("/metrics", include_in_schema=False)
@limiter.exempt
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
