from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api import auth, admin, participant
from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Get logger for this module
logger = logging.getLogger(__name__)
logger.info("Starting Shabbat Apartment Program API")


app = FastAPI(
    title="Shabbat Apartment Program API",
    description="Meal and learning compliance ledger for the Shabbat Apartment Program",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# Include routers
app.include_router(auth.router)
app.include_router(participant.router)
app.include_router(admin.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Shabbat Apartment Program API", "version": "1.0.0"}


@app.get("/api/health")
def health_check():
    """Health check endpoint; checks API and database connectivity."""
    from app.db.base import get_db
    from sqlalchemy import text
    from datetime import datetime, timezone

    db_status = "unreachable"
    db_error = None
    db_gen = get_db()
    try:
        db = next(db_gen)
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_error = str(e)
    finally:
        db_gen.close()

    status = "healthy" if db_status == "connected" else "degraded"

    return {
        "status": status,
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "api": "ok",
            "database": db_status,
        },
        **({"database_error": db_error} if db_error else {})
    }
