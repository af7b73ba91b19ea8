"""
FOI Portal - Backend API
FastAPI + SQLModel + Supabase
"""
from dotenv import load_dotenv
load_dotenv()  # Load .env before any other imports

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from api.v1 import (
    auth,
    dashboard,
    foi_requests,
    reports,
    staff,
    activity_logs,
)
from sqlalchemy.exc import SQLAlchemyError

from domain.errors import (
    InvalidStatusError,
    InvalidTransitionError,
    RecordNotFoundError,
    ReferralError,
)
from domain.services.activity_logger import ActivityLogger, ActivityLogQueue
from infrastructure.database import dispose_engine

# Setup structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ]
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    # Tables live in Supabase already; the engine connects lazily
    queue = ActivityLogQueue(ActivityLogger())
    queue.start()
    app.state.audit_queue = queue
    logger.info("backend_started", service=settings.service_name)

    yield

    # Shutdown
    await queue.stop()
    app.state.audit_queue = None
    await dispose_engine()
    logger.info("backend_stopped")


app = FastAPI(
    title="FOI Portal API",
    description="Freedom-of-Information request portal and staff dashboard",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidStatusError)
@app.exception_handler(ReferralError)
async def unprocessable_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("store_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred"})


# Routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["dashboard"])
app.include_router(foi_requests.router, prefix="/api/v1/requests", tags=["requests"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])
app.include_router(staff.router, prefix="/api/v1/staff", tags=["staff"])
app.include_router(activity_logs.router, prefix="/api/v1/activity-logs", tags=["activity-logs"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.service_name}


@app.get("/")
async def root():
    return {"message": "FOI Portal API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info"
    )
