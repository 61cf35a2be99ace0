"""
RelayBot: FastAPI Application Entry Point

This module initializes the FastAPI application and defines the endpoints:
- /health: Health check endpoint
- /config: Non-sensitive configuration values
- /services: Service registry information
- /messages: Process one inbound chat message
- /gateway/stats: Cache and rate-limit statistics
- /gateway/cache/clear: Drop every cached response

The application uses a lifespan context manager to:
1. Load and validate configuration at startup
2. Configure logging based on settings
3. Build the RequestExecutor, domain services and MessageProcessor
4. Close the shared HTTP client on shutdown
"""

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from relaybot import __version__
from relaybot.config import Settings, get_settings, configure_logging
from relaybot.dispatcher import InMemoryPreferenceStore, MessageProcessor
from relaybot.gateway import RequestExecutor
from relaybot.registry import get_service_registry
from relaybot.schemas import (
    CacheClearResponse,
    ComponentHealth,
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    GatewayStatsResponse,
    HealthResponse,
    MessageRequest,
    MessageResponse,
    ServiceInfo,
    ServicesResponse,
    message_response_from_reply,
)
from relaybot.services import build_services

logger = logging.getLogger(__name__)

_start_time: float = 0.0


def create_executor(settings: Settings) -> RequestExecutor:
    """Build the process-wide RequestExecutor."""
    return RequestExecutor(registry=get_service_registry(), settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup/shutdown events.

    On startup:
    - Loads configuration from environment
    - Configures logging
    - Builds executor, services, preference store and processor

    On shutdown:
    - Closes the executor's HTTP client
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("RelayBot starting up...")
    logger.info("=" * 60)
    logger.info(f"Default AI provider: {settings.default_ai_provider}")
    logger.info(f"Command prefix: {settings.command_prefix}")
    logger.info(
        f"Retry backoff: {settings.retry_base_delay}s base, {settings.retry_max_delay}s cap"
    )
    logger.info(f"Call deadline: {settings.request_deadline_seconds}s")
    logger.info(f"Debug mode: {'enabled' if settings.debug else 'disabled'}")

    if settings.gemini_api_key is None:
        logger.warning("Gemini API key: not configured (gemini chat will fail)")
    else:
        logger.info("Gemini API key: configured")
    if settings.openai_api_key is None:
        logger.warning("OpenAI API key: not configured (openai chat will fail)")
    else:
        logger.info("OpenAI API key: configured")

    executor = create_executor(settings)
    services = build_services(executor)
    preferences = InMemoryPreferenceStore(default_language=settings.default_language)

    app.state.executor = executor
    app.state.processor = MessageProcessor(services, preferences, settings)

    logger.info(f"Registry loaded with {len(executor.registry.list_services())} services")

    global _start_time
    _start_time = time.time()

    logger.info("=" * 60)
    logger.info("RelayBot ready to accept messages")

    yield  # Application runs here

    logger.info("RelayBot shutting down...")
    await executor.aclose()


app = FastAPI(
    title="RelayBot",
    description="Resilient API gateway and command dispatcher for chat bots",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_processor(request: Request) -> MessageProcessor:
    return request.app.state.processor


def get_executor(request: Request) -> RequestExecutor:
    return request.app.state.executor


@app.get("/")
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "RelayBot",
        "description": "Resilient API gateway for chat bots",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "config": "/config",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check system health and component status.",
)
async def health_check(request: Request):
    """
    Health check endpoint for monitoring and orchestration.

    Checks:
    - Registry availability
    - Gateway (executor) presence and rate-limited services
    - System uptime
    """
    components = []
    overall_status = "healthy"

    registry = get_service_registry()
    service_count = len(registry.list_services())
    components.append(
        ComponentHealth(
            name="registry",
            status="healthy" if service_count else "unhealthy",
            message=f"{service_count} services registered",
        )
    )
    if not service_count:
        overall_status = "unhealthy"

    executor = getattr(request.app.state, "executor", None)
    if executor is None:
        components.append(
            ComponentHealth(name="gateway", status="unhealthy", message="Gateway not started")
        )
        overall_status = "unhealthy"
    else:
        limited = [
            name
            for name, window in executor.rate_limiter.status().items()
            if window["is_limited"]
        ]
        components.append(
            ComponentHealth(
                name="gateway",
                status="degraded" if limited else "healthy",
                message=f"Rate limited: {', '.join(limited)}" if limited else None,
            )
        )
        if limited and overall_status == "healthy":
            overall_status = "degraded"

    uptime = time.time() - _start_time if _start_time > 0 else 0.0

    return HealthResponse(
        status=overall_status,
        service="relaybot",
        version=__version__,
        components=components,
        uptime_seconds=uptime,
    )


@app.get("/config")
async def show_config(settings: Settings = Depends(get_settings)):
    """
    Returns non-sensitive configuration values.

    API keys are SecretStr and are NOT exposed in this endpoint.
    """
    return {
        "dispatch": {
            "command_prefix": settings.command_prefix,
            "default_ai_provider": settings.default_ai_provider,
            "default_tts_voice": settings.default_tts_voice,
            "default_language": settings.default_language,
        },
        "gateway": {
            "retry_base_delay": settings.retry_base_delay,
            "retry_max_delay": settings.retry_max_delay,
            "default_timeout_seconds": settings.default_timeout_seconds,
            "default_max_retries": settings.default_max_retries,
            "cache_max_entries": settings.cache_max_entries,
            "default_cache_ttl": settings.default_cache_ttl,
            "request_deadline_seconds": settings.request_deadline_seconds,
        },
        "server": {
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
        },
        "logging": {
            "level": settings.log_level,
        },
        "api_keys_configured": {
            "gemini": settings.gemini_api_key is not None,
            "openai": settings.openai_api_key is not None,
        },
    }


@app.get("/services", response_model=ServicesResponse)
async def list_services(settings: Settings = Depends(get_settings)):
    """
    List every registered upstream service with its limits and the
    worst-case latency of one call.
    """
    registry = get_service_registry()
    services = [
        ServiceInfo(
            key=s.key,
            display_name=s.display_name,
            category=s.category.value,
            base_url=s.base_url,
            endpoints=s.endpoints,
            timeout_seconds=s.timeout_seconds,
            max_retries=s.max_retries,
            rate_limit=s.rate_limit.model_dump(),
            requires_api_key=s.requires_api_key,
            worst_case_latency_seconds=s.worst_case_latency(
                settings.retry_base_delay, settings.retry_max_delay
            ),
        )
        for s in registry.list_services()
    ]
    return ServicesResponse(services=services, total_services=len(services))


@app.post(
    "/messages",
    response_model=MessageResponse,
    responses={
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Process a message",
    description="Classify one inbound chat message and return the reply to send.",
)
async def process_message(
    request: MessageRequest,
    processor: MessageProcessor = Depends(get_processor),
):
    """
    Main message endpoint, called by the chat transport.

    Flow:
    1. Load the sender's session preferences
    2. Classify the text (command or implicit intent)
    3. Run the handler through the gateway
    4. Return a text or media reply
    """
    start_time = time.perf_counter()

    try:
        reply = await processor.process(request.user_id, request.text, request.username)
    except Exception:
        logger.exception("Message processing failed")
        raise HTTPException(
            status_code=500,
            detail={"code": ErrorCodes.PROCESSING_ERROR, "message": "Message processing failed"},
        )

    latency_ms = (time.perf_counter() - start_time) * 1000
    return message_response_from_reply(reply, latency_ms)


@app.get("/gateway/stats", response_model=GatewayStatsResponse)
async def gateway_stats(executor: RequestExecutor = Depends(get_executor)):
    """
    Cache statistics and per-service rate-limit windows.
    """
    return executor.stats()


@app.post("/gateway/cache/clear", response_model=CacheClearResponse)
async def clear_cache(executor: RequestExecutor = Depends(get_executor)):
    """
    Drop every cached response (operator action).
    """
    return CacheClearResponse(cleared=executor.clear_cache())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Returns a consistent error response format with the first validation
    error's details for client-side error handling.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code=ErrorCodes.VALIDATION_ERROR,
                message=first_error.get("msg", "Validation failed"),
                field=".".join(str(loc) for loc in first_error.get("loc", [])),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """
    Handle HTTP exceptions with consistent format.
    """
    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": detail})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(detail)}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full exception for debugging and returns a generic error
    response to avoid leaking implementation details.
    """
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": ErrorCodes.INTERNAL_ERROR,
                "message": "An unexpected error occurred",
            }
        },
    )
