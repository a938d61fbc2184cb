import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables (only in development)
# In containers, environment variables are set directly
if os.getenv("ENVIRONMENT") != "production":
    load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Watched folders
WATCH_FOLDER = os.getenv("WATCH_FOLDER", "./transcripts")
EMAIL_FOLDER = os.getenv("EMAIL_FOLDER", "")  # Empty disables the email watcher

# Watcher tuning
STABILITY_THRESHOLD_SECONDS = float(os.getenv("STABILITY_THRESHOLD_SECONDS", "5.0"))  # Long enough for cloud-drive sync
STABILITY_POLL_INTERVAL_SECONDS = float(os.getenv("STABILITY_POLL_INTERVAL_SECONDS", "0.5"))
WATCH_DEPTH = int(os.getenv("WATCH_DEPTH", "2"))

# Extraction
EXTRACTION_TIMEOUT_SECONDS = float(os.getenv("EXTRACTION_TIMEOUT_SECONDS", "120"))

# Email
INLINE_ATTACHMENT_MIN_BYTES = int(os.getenv("INLINE_ATTACHMENT_MIN_BYTES", "10240"))
ATTACHMENT_STAGING_DIR = os.getenv("ATTACHMENT_STAGING_DIR", ".prism-attachments")

# Analysis dispatch
ANALYZE_IMMEDIATELY = os.getenv("ANALYZE_IMMEDIATELY", "true").lower() == "true"
ANALYZER_TYPE = os.getenv("ANALYZER_TYPE", "mock")  # Options: 'mock', 'celery', 'none'
ANALYSIS_WORKERS = int(os.getenv("ANALYSIS_WORKERS", "2"))
ANALYSIS_MAX_RETRIES = int(os.getenv("ANALYSIS_MAX_RETRIES", "3"))

# Database configuration
DATABASE_TYPE = os.getenv("DATABASE_TYPE", "json")  # Options: 'json', 'memory'
JSON_DB_PATH = os.getenv("JSON_DB_PATH", str(BASE_DIR / "data" / "json_db"))

# Failure ledgers
DEAD_LETTER_PATH = os.getenv("DEAD_LETTER_PATH", str(BASE_DIR / "data" / "dead_letter.jsonl"))
QUARANTINE_PATH = os.getenv("QUARANTINE_PATH", str(BASE_DIR / "data" / "quarantine.json"))
QUARANTINE_MAX_ATTEMPTS = int(os.getenv("QUARANTINE_MAX_ATTEMPTS", "3"))

# Message Queue configuration (Celery)
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/2")

# API server
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "3001"))
