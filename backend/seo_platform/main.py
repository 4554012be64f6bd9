"""
FastAPI main application module for the SEO platform API
"""

from fastapi import FastAPI, Request, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import time
import logging

from seo_platform.core.config import settings
from seo_platform.core.database import get_db
from seo_platform.core.database_utils import DatabaseHealthCheck, create_all_tables, check_database_connection
from seo_platform.api.api_v1.api import api_router
from seo_platform.services.plan_limits import PlanLimitExceeded

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="SEO Platform API",
    description="Multi-tenant SEO workspace: projects, keyword research, site audits and AI content",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS + settings.DASH_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response

# Include API routes
app.include_router(api_router, prefix="/api/v1")

# Health check endpoint
@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint for monitoring"""
    db_status = DatabaseHealthCheck.check_connection(db)
    body = {
        "status": db_status["status"],
        "database": db_status,
        "timestamp": time.time(),
        "version": "1.0.0"
    }
    if db_status["status"] != "healthy":
        return JSONResponse(status_code=503, content=body)
    return body

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "SEO Platform API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }

# Malformed bodies, query strings and path parameters
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request data",
            "issues": jsonable_encoder(exc.errors()),
        }
    )

# Plan limits answer with a flat body
@app.exception_handler(PlanLimitExceeded)
async def plan_limit_exception_handler(request: Request, exc: PlanLimitExceeded):
    return JSONResponse(
        status_code=403,
        content={
            "error": exc.check.reason,
            "current": exc.check.current,
            "limit": exc.check.limit,
        }
    )

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred"
        }
    )

# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Starting SEO Platform API...")

    # Check database connection
    if not check_database_connection():
        logger.error("Failed to connect to database")
        raise Exception("Database connection failed")

    # Production schemas are managed outside the app
    if settings.ENVIRONMENT in ("development", "test"):
        create_all_tables()
        logger.info("Database tables created/verified successfully")

    logger.info("Application startup complete")

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown"""
    logger.info("Shutting down SEO Platform API...")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "seo_platform.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
