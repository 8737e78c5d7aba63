from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import logging
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError

from app.core.config import settings
from app.core.errors import AppError, app_error_handler
from app.middleware.request_logging import RequestLoggingMiddleware
from app.middleware.auth_logging import AuthLoggingMiddleware
from app.modules.posts.api.router import router as posts_router
from app.modules.posts.comments.api.router import router as comments_router
from app.modules.posts.reactions.api.router import router as reactions_router
from app.modules.notifications.api.router import router as notifications_router
from app.db.init_db import create_all_tables

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")

# Initialize the FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    exception_handlers={
        RequestValidationError: request_validation_exception_handler,
        HTTPException: http_exception_handler,
        AppError: app_error_handler,
    },
    debug=settings.DEBUG,
    description="Post cards and post mutations for the social feed",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    create_all_tables()

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])
app.include_router(comments_router, prefix=f"{settings.API_V1_STR}/posts/{{post_id}}/comments", tags=["comments"])
app.include_router(reactions_router, prefix=f"{settings.API_V1_STR}/posts/{{post_id}}", tags=["reactions"])
app.include_router(notifications_router, prefix=f"{settings.API_V1_STR}/notifications", tags=["notifications"])

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
