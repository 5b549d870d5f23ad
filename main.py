import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gymdesk import __version__, config
from gymdesk.db import Database
from gymdesk.services.edit_sessions import EditSessionRegistry
from gymdesk.tasks import start_scheduler, stop_scheduler

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Import routers
from gymdesk.routers import health
from gymdesk.routers.cms import router as cms_router
from gymdesk.routers.member import router as member_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {config.APP_NAME}...")
    app.state.database = Database()
    app.state.edit_sessions = EditSessionRegistry(timedelta(minutes=config.EDIT_SESSION_TTL_MINUTES))
    if config.SCHEDULER_ENABLED:
        start_scheduler(app.state.database)
    yield
    # Shutdown
    stop_scheduler()
    logger.info(f"Shutting down {config.APP_NAME}...")


app = FastAPI(
    title=config.APP_NAME,
    description="API for gym membership management and member check-in",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


VALIDATION_MESSAGES = {
    "String should have at least 1 character": "Must not be empty",
    "Field required": "This field is required",
    "Input should be a valid integer": "Must be a whole number",
    "Input should be a valid integer, unable to parse string as an integer": "Must be a whole number",
    "Input should be a valid number": "Must be a number",
}


def _describe_validation(error):
    msg = error["msg"]
    friendly = VALIDATION_MESSAGES.get(msg)
    if friendly:
        return friendly
    # Handle pattern: "String should have at least N characters"
    if "should have at least" in msg and "character" in msg:
        return f"Must be at least {msg.split('at least ')[1].split(' ')[0]} characters"
    if "should be greater than" in msg:
        return f"Must be greater than {msg.split('greater than ')[1]}"
    if "should be less than" in msg:
        return f"Must be less than {msg.split('less than ')[1]}"
    return msg


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    errors = exc.errors()
    parts = []
    for e in errors:
        field = e["loc"][-1] if e.get("loc") else ""
        described = _describe_validation(e)
        parts.append(f"{field}: {described}" if field and field != "__root__" else described)
    message = "; ".join(parts)
    return JSONResponse(
        status_code=422,
        content={"detail": {"error_code": "VALIDATION_ERROR", "message": message}},
    )


@app.get("/")
def root():
    return {
        "message": f"Welcome to {config.APP_NAME}",
        "version": __version__,
        "docs": "/docs",
    }


# Include routers
app.include_router(health.router)
app.include_router(cms_router)
app.include_router(member_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8181, reload=True)
