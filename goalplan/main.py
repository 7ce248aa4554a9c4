import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from goalplan import db
from goalplan.accounts.router import router as accounts_router
from goalplan.accounts.store import MemoryAccountStore, SqlAccountStore
from goalplan.config import settings
from goalplan.exceptions import GoalPlanError, status_code_for
from goalplan.logging_config import setup_logging
from goalplan.planner.quota import GuestQuotaTracker
from goalplan.planner.router import goals_router, guest_router
from goalplan.planner.router import router as planner_router
from goalplan.planner.store import MemoryGoalStore, SqlGoalStore

logger = logging.getLogger(__name__)


def configure_state(app: FastAPI, backend: str) -> None:
    """Attach the stores and the guest quota tracker for `backend` ("memory" or "sql")."""
    if backend == "sql":
        app.state.goal_store = SqlGoalStore(db.async_session)
        app.state.account_store = SqlAccountStore(db.async_session)
    elif backend == "memory":
        app.state.goal_store = MemoryGoalStore()
        app.state.account_store = MemoryAccountStore()
    else:
        raise ValueError(f"Unknown storage backend: {backend}")
    app.state.quota_tracker = GuestQuotaTracker(
        goal_limit=settings.guest_daily_goal_limit,
        report_limit=settings.guest_daily_report_limit,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    configure_state(app, settings.storage_backend)
    if settings.storage_backend == "sql":
        await db.init_schema()
    logger.info("Application startup complete (storage=%s)", settings.storage_backend)
    try:
        yield
    finally:
        if settings.storage_backend == "sql":
            await db.engine.dispose()
            logger.info("Database disposed")


app = FastAPI(title="GoalPlan", version="0.1.0", lifespan=lifespan)


@app.exception_handler(GoalPlanError)
async def goalplan_error_handler(request: Request, exc: GoalPlanError):
    status_code = status_code_for(exc)
    logger.warning("Service error: %s: %s", type(exc).__name__, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.critical("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(planner_router)
app.include_router(goals_router)
app.include_router(guest_router)
app.include_router(accounts_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "planner": {
            "calculate": "/planner/calculate",
            "what_if": "/planner/what-if",
            "reality_check": "/planner/reality-check",
            "goal_types": "/planner/goal-types",
            "presets": "/planner/presets",
        },
        "goals": {
            "list": "/goals",
            "detail": "/goals/{id}",
            "projection": "/goals/{id}/projection",
            "report": "/goals/{id}/report",
            "report_csv": "/goals/{id}/report.csv",
            "export_csv": "/goals/export.csv",
        },
        "guest_quota": "/guest/quota",
        "accounts": {
            "register": "/accounts/register",
            "login": "/accounts/login",
            "me": "/accounts/me",
            "sync": "/accounts/me/sync",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
