"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.
"""
from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from datetime import datetime, timezone
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .auth.router import router as auth_router
from .patients.router import router as patients_router
from .database import Base, engine, get_db
from .config import get_settings
from .auth import models as auth_models  # noqa: F401  registers users table
from .patients import models as patient_models  # noqa: F401  registers patient_details table
from .exceptions import register_exception_handlers, error_body
from .core.middleware import setup_middlewares

API_VERSION = "1.0.0"

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create database tables if they don't exist
try:
    Base.metadata.create_all(bind=engine)
except SQLAlchemyError as e:
    logger.error(f"❌ Could not create tables on startup: {str(e)}")

# Create FastAPI application
app = FastAPI(
    title="Hospital Records API",
    description="Registration, login and patient records for patients and providers",
    version=API_VERSION
)

# Register exception handlers
register_exception_handlers(app)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware
setup_middlewares(app)

# Include routers
app.include_router(auth_router)
app.include_router(patients_router)

# Root endpoint
@app.get("/")
def root():
    """
    Root endpoint with the server banner.

    Returns:
        dict: Banner with API version
    """
    return {
        "success": True,
        "message": "Hospital API Server is running",
        "version": API_VERSION
    }

# Health check endpoint
@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for monitoring.

    Pings the database with a trivial query.

    Returns:
        dict: Health status information
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=500,
            content=error_body("Database connection failed", str(e))
        )
    return {
        "success": True,
        "message": "Server and database are healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


def run():
    """Start the API with uvicorn on the configured host and port."""
    import uvicorn

    logger.info(f"🚀 Server is running on port {settings.port}")
    logger.info(f"🔐 Auth endpoints: http://localhost:{settings.port}/api/auth")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
