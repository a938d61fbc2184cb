"""
Shared dependencies for routers.
Provides store, analysis queue, pipeline and watcher initialization.

The API and the CLI both build the service graph through this module so
the watcher, folder import and status endpoints share one dedup gate.
"""
from pathlib import Path

from ..core.config import (
    ANALYSIS_MAX_RETRIES,
    ANALYSIS_WORKERS,
    ANALYZE_IMMEDIATELY,
    ANALYZER_TYPE,
    DATABASE_TYPE,
    DEAD_LETTER_PATH,
    EMAIL_FOLDER,
    JSON_DB_PATH,
    QUARANTINE_MAX_ATTEMPTS,
    QUARANTINE_PATH,
    WATCH_FOLDER,
)
from ..core.logging_config import get_logger
from ..domain.value_objects import ROLE_EMAIL, ROLE_TRANSCRIPTS
from ..services.analysis import AnalyzerFactory
from ..services.analysis_queue import AnalysisQueue, DeadLetterLog
from ..services.database import StoreFactory
from ..services.ingestion_pipeline import IngestionPipeline
from ..services.quarantine import QuarantineLedger
from ..services.record_materializer import RecordMaterializer
from ..services.watcher import WatcherManager

logger = get_logger(__name__)

# Global services (initialized on startup)
store = None
analysis_queue = None
quarantine = None
pipeline = None
watcher_manager = None


async def initialize_store():
    """Initialize the transcript store based on configuration."""
    global store
    
    logger.info(f"Initializing store: {DATABASE_TYPE}")
    if DATABASE_TYPE.lower() == "json":
        logger.debug(f"  → Store Path: {JSON_DB_PATH}")
        store = await StoreFactory.create_and_initialize("json", data_dir=Path(JSON_DB_PATH))
    else:
        store = await StoreFactory.create_and_initialize(DATABASE_TYPE)
    logger.info(f"  ✅ {DATABASE_TYPE.upper()} store initialized")


async def initialize_services():
    """
    Initialize everything that sits on top of the store:
    analysis queue, quarantine ledger, record materializer, pipeline
    and the watcher manager. Watchers are not started here.
    """
    global analysis_queue, quarantine, pipeline, watcher_manager
    
    if store is None:
        await initialize_store()
    
    logger.info("Initializing services...")
    analyzer = AnalyzerFactory.get_analyzer(ANALYZER_TYPE)
    analysis_queue = AnalysisQueue(
        analyzer,
        workers=ANALYSIS_WORKERS,
        max_retries=ANALYSIS_MAX_RETRIES,
        dead_letter=DeadLetterLog(Path(DEAD_LETTER_PATH)),
    )
    await analysis_queue.start()
    logger.info(f"  ✅ Analysis queue started ({ANALYSIS_WORKERS} workers)")
    
    quarantine = QuarantineLedger(Path(QUARANTINE_PATH), max_attempts=QUARANTINE_MAX_ATTEMPTS)
    logger.info(f"  ✅ Quarantine ledger loaded ({len(quarantine)} entries)")
    
    materializer = RecordMaterializer(
        store,
        analysis_queue=analysis_queue,
        analyze_immediately=ANALYZE_IMMEDIATELY,
    )
    pipeline = IngestionPipeline(materializer, quarantine=quarantine)
    watcher_manager = WatcherManager(pipeline)
    logger.info("  ✅ Ingestion pipeline ready")


async def start_watchers():
    """Start the configured watchers (the email watcher only if EMAIL_FOLDER is set)."""
    await watcher_manager.start(ROLE_TRANSCRIPTS, WATCH_FOLDER)
    if EMAIL_FOLDER:
        await watcher_manager.start(ROLE_EMAIL, EMAIL_FOLDER)


async def shutdown_services():
    """Stop watchers, drain analysis and close the store."""
    global store, analysis_queue, quarantine, pipeline, watcher_manager
    
    if watcher_manager is not None:
        await watcher_manager.stop_all()
        await watcher_manager.drain()
    if analysis_queue is not None:
        await analysis_queue.stop(drain=True)
    if store is not None:
        await store.close()
    store = analysis_queue = quarantine = pipeline = watcher_manager = None


def get_store():
    """Get transcript store (dependency injection)."""
    if store is None:
        raise RuntimeError("Store not initialized")
    return store


def get_analysis_queue():
    """Get analysis queue (dependency injection)."""
    if analysis_queue is None:
        raise RuntimeError("Analysis queue not initialized")
    return analysis_queue


def get_pipeline():
    """Get ingestion pipeline (dependency injection)."""
    if pipeline is None:
        raise RuntimeError("Ingestion pipeline not initialized")
    return pipeline


def get_watcher_manager():
    """Get watcher manager (dependency injection)."""
    if watcher_manager is None:
        raise RuntimeError("Watcher manager not initialized")
    return watcher_manager
