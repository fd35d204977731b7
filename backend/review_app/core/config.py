import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

SECRET_KEY: str = os.getenv("SECRET_KEY", "content-review-dev-secret-change-in-prod")
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24h

# Database: stored in backend/data/
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))

DATABASE_PATH: str = os.getenv(
    "DATABASE_PATH",
    os.path.join(BACKEND_DIR, "data", "review.db"),
)
# How long a writer waits for another writer's lock (promotion serialises on it)
DB_BUSY_TIMEOUT_SECONDS: float = float(os.getenv("DB_BUSY_TIMEOUT_SECONDS", "10"))

# Remote catalog mirror (Supabase REST). Empty URL disables mirroring.
CATALOG_MIRROR_URL: str = os.getenv("CATALOG_MIRROR_URL", "")
CATALOG_MIRROR_KEY: str = os.getenv("CATALOG_MIRROR_KEY", "")
CATALOG_MIRROR_TIMEOUT_SECONDS: float = float(os.getenv("CATALOG_MIRROR_TIMEOUT_SECONDS", "10"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")
