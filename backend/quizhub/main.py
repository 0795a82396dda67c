
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .database import close_database, create_all
from .errors import QuizHubError
from .logging_config import LoggingMiddleware, get_logger, setup_logging
from .models import utcnow
from .routers import attempts, auth, leaderboard, quiz, users
from .version import APP_VERSION

# Initialize logging before creating the app
setup_logging()

logger = get_logger("quizhub.main")

app = FastAPI(title="QuizHub API", version=APP_VERSION)

# Add logging middleware first
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create API router with /api prefix
api_router = APIRouter(prefix="/api")

ENDPOINT_GROUPS = {
    "health": "/api/health",
    "auth": "/api/auth",
    "user": "/api/user",
    "quiz": "/api/quiz",
    "attempts": "/api/attempts",
    "leaderboard": "/api/leaderboard",
}


@app.exception_handler(QuizHubError)
async def quizhub_error_handler(request: Request, exc: QuizHubError):
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    else:
        logger.info("Request rejected", path=request.url.path, status_code=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    logger.info("Invalid request", path=request.url.path, errors_count=len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Invalid request", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": f"Internal server error: {exc}"},
    )


@api_router.get("/")
async def api_root():
    """API root endpoint"""
    return {
        "message": "QuizHub Learning Platform API",
        "version": APP_VERSION,
        "endpoints": ENDPOINT_GROUPS,
    }


@api_router.get("/health")
async def health_check():
    """Health check endpoint"""
    logger.debug("Health check requested")
    return {
        "success": True,
        "message": "QuizHub API is running",
        "timestamp": utcnow().isoformat(),
        "status": "UP",
    }


api_router.include_router(auth.router)
api_router.include_router(quiz.router)
api_router.include_router(attempts.router)
api_router.include_router(users.router)
api_router.include_router(leaderboard.router)

app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Welcome to QuizHub API", "api": "/api", "version": APP_VERSION}


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    if settings.auto_create_tables:
        await create_all()
        logger.info("Database tables ensured")
    logger.info("Application startup completed", version=APP_VERSION)


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    await close_database()
    logger.info("Application shutdown completed")
