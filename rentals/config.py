import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rentals.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# Public base URL for calendar export links; falls back to the request host when unset
FRONTEND_URL = os.getenv("FRONTEND_URL")

# Redis (ARQ worker)
REDIS_URL = os.getenv("REDIS_URL")

# iCal sync
# Set ICAL_SYNC_ENABLED=false when the ARQ worker runs the sync instead of the API process
ICAL_SYNC_ENABLED = os.getenv("ICAL_SYNC_ENABLED", "true").lower() == "true"
ICAL_SYNC_INTERVAL_MINUTES = int(os.getenv("ICAL_SYNC_INTERVAL_MINUTES", "30"))
ICAL_SYNC_STARTUP_DELAY_SECONDS = float(os.getenv("ICAL_SYNC_STARTUP_DELAY_SECONDS", "10"))
ICAL_FETCH_TIMEOUT_SECONDS = float(os.getenv("ICAL_FETCH_TIMEOUT_SECONDS", "20"))
# Events that ended more than this many days ago are not imported
ICAL_STALE_AFTER_DAYS = int(os.getenv("ICAL_STALE_AFTER_DAYS", "7"))
# Export feed includes bookings checking out at most this many days ago
ICAL_EXPORT_WINDOW_DAYS = int(os.getenv("ICAL_EXPORT_WINDOW_DAYS", "30"))
ICAL_BLOCK_LABEL = os.getenv("ICAL_BLOCK_LABEL", "Calendar block")
ICAL_DEFAULT_GUEST_LABEL = os.getenv("ICAL_DEFAULT_GUEST_LABEL", "External booking")
ICAL_USER_AGENT = os.getenv("ICAL_USER_AGENT", "RentalsBackend/1.0 (+calendar-sync)")
