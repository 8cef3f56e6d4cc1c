import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from sleeper_sync.database import get_db, create_tables
from sleeper_sync.config import settings
from sleeper_sync.api import sleeper, sync

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    create_tables()
    yield

# Create FastAPI application
app = FastAPI(
    title="Sleeper League Sync API",
    description="Mirrors Sleeper fantasy league history into a relational store",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],  # Dashboard development server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(sleeper.router, prefix="/api/v1/sleeper", tags=["sleeper"])
app.include_router(sync.router, prefix="/api/v1/sync", tags=["sync"])

@app.get("/")
async def root():
    return {
        "message": "Sleeper League Sync API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "sleeper": "/api/v1/sleeper",
            "sync": "/api/v1/sync"
        }
    }

@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    try:
        # Simple database connectivity check
        db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
