import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wellcontrol.api.v1.routes import api_router
from wellcontrol.core.config import settings
from wellcontrol.middleware import ErrorHandlingMiddleware, LoggingMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    API for wellbore hydraulics during tripping operations

    ## Calculations

    - MD → TVD conversion over a survey or directional plan
    - Swab/surge pressure from pipe movement (point, integrated and trip series)
    - Slug hydrostatic deltas, bottomhole pressure and pressure window checks
    - Backfill volumes per pulled stand
    - Stand-by-stand trip simulation with field recording of actual values
    """,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,  # Disable docs in production
    redoc_url="/redoc" if settings.DEBUG else None,  # Disable redoc in production
)

# Add CORS middleware with settings from config
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
    expose_headers=["X-Process-Time"],
)

# Unhandled exceptions are rendered as the standard error envelope
app.add_middleware(ErrorHandlingMiddleware)

# Add logging middleware
app.add_middleware(LoggingMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}

@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return {"status": "healthy"}
