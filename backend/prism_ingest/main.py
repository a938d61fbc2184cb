from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
import sys

from .core.config import (
    ANALYZER_TYPE,
    DATABASE_TYPE,
    EMAIL_FOLDER,
    STABILITY_THRESHOLD_SECONDS,
    WATCH_DEPTH,
    WATCH_FOLDER,
)
from .core.exceptions import IngestionError
from .core.logging_config import setup_logging, get_logger
from .routers import config, status
from .routers.dependencies import (
    initialize_store,
    initialize_services,
    shutdown_services,
    start_watchers,
)

# Initialize logging
setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Prism Ingest API",
    description="Watched-folder ingestion of transcripts, documents and email",
    version="1.0.0",
)

cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(status.router, tags=["Status"])
app.include_router(config.router, tags=["Config"])


@app.exception_handler(IngestionError)
async def ingestion_error_handler(request: Request, exc: IngestionError):
    logger.error(f"Ingestion error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc), "filepath": exc.filepath})


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.on_event("startup")
async def startup_event():
    """Initialize store, analysis queue and watchers."""
    logger.info("=" * 60)
    logger.info("Starting Prism ingestion service...")
    logger.info("=" * 60)
    logger.info(f"  → Python Version: {sys.version.split()[0]}")
    logger.info(f"  → Store: {DATABASE_TYPE.upper()}")
    logger.info(f"  → Analyzer: {ANALYZER_TYPE}")
    logger.info(f"  → Watch Folder: {WATCH_FOLDER}")
    logger.info(f"  → Email Folder: {EMAIL_FOLDER or 'Disabled'}")
    logger.info(f"  → Stability Window: {STABILITY_THRESHOLD_SECONDS}s, Depth: {WATCH_DEPTH}")
    
    await initialize_store()
    await initialize_services()
    await start_watchers()
    
    logger.info("✅ Prism ingestion service initialized successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop watchers and drain in-flight work."""
    logger.info("Shutting down Prism ingestion service...")
    await shutdown_services()
    logger.info("Prism ingestion service shutdown complete")
