# app/main.py
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager
from app.api import auth, tournaments, users, functions, chat

import logging
import time

from app.core.config import settings, validate_settings
from app.core.context import AuthEvent, auth_events
from app.core.database import init_db, check_db_connection

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def log_auth_event(event: AuthEvent, session) -> None:
    user_id = getattr(session, "user_id", None)
    logger.info(f"Auth event {event.value} (user={user_id})")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown"""
    logger.info("🚀 BGMI Tournament Hub starting...")
    validate_settings()

    if check_db_connection():
        logger.info("✅ Database connected")
        init_db()
        logger.info("✅ Tables ready")
    else:
        logger.error("❌ Database is unreachable!")

    unsubscribe = auth_events.subscribe(log_auth_event)

    yield

    unsubscribe()
    logger.info("👋 Shutting down...")


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="BGMI tournament registration with simulated UPI payments and an AI assistant",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# OAuth state lives in the signed session cookie
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(round(process_time * 1000, 2)) + "ms"
    return response


# Validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"][1:])  # Skip "body"/"query"
        errors.append({
            "field": field,
            "message": error["msg"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation error",
            "errors": errors
        }
    )


# Generic error handler
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error: {exc}")

    if settings.DEBUG:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc)}
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )

app.include_router(
    auth.router,
    prefix="/api/v1/auth",
    tags=["🔐 Authentication"]
)

app.include_router(
    users.router,
    prefix="/api/v1/users",
    tags=["👤 Users"]
)

app.include_router(
    tournaments.router,
    prefix="/api/v1/tournaments",
    tags=["🏆 Tournaments"]
)

app.include_router(
    chat.router,
    prefix="/api/v1/assistant",
    tags=["🤖 Assistant"]
)

app.include_router(
    functions.router,
    prefix="/api/v1/functions",
    tags=["⚡ Functions"]
)


# Health check endpoints
@app.get("/", tags=["Health"])
def root():
    return {
        "status": "active",
        "message": f"{settings.APP_NAME} is running! 🚀",
        "version": "1.0.0"
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Health check for the load balancer"""
    db_status = "connected" if check_db_connection() else "disconnected"

    return {
        "status": "healthy",
        "database": db_status,
        "ai_assistant": "configured" if settings.GEMINI_API_KEY else "disabled",
        "debug_mode": settings.DEBUG
    }


@app.get("/api/v1", tags=["Health"])
def api_info():
    return {
        "name": f"{settings.APP_NAME} API",
        "version": "1.0.0",
        "endpoints": {
            "auth": "/api/v1/auth",
            "users": "/api/v1/users",
            "tournaments": "/api/v1/tournaments",
            "assistant": "/api/v1/assistant",
            "functions": "/api/v1/functions"
        }
    }
