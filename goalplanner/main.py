"""Main FastAPI application for the Goal Planner backend."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from goalplanner.api.routes.auth import router as auth_router
from goalplanner.api.routes.goals import router as goals_router
from goalplanner.core.config import settings
from goalplanner.core.errors import GoalPlannerError
from goalplanner.core.logging import configure_logging
from goalplanner.core.middleware import RequestIDMiddleware
from goalplanner.observability.client import init_opik
from goalplanner.observability.tracing import trace

configure_logging(log_level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id"],
)
app.add_middleware(RequestIDMiddleware)
app.include_router(auth_router)
app.include_router(goals_router)


@app.exception_handler(GoalPlannerError)
async def goal_planner_error_handler(request: Request, exc: GoalPlannerError) -> JSONResponse:
    """Render domain failures as a short JSON error; details stay in the server log."""
    request_id = getattr(request.state, "request_id", None)
    log = logger.warning if exc.status_code < 500 else logger.error
    log("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code, exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(request_id))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR", "request_id": request_id},
    )


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
