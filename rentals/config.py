"""
Runtime configuration for the rentals backend.

Values come from the environment; a ``.env`` file next to the process is
loaded first.
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# JSON document holding users, groups, apartments and logs
DATA_FILE = os.getenv("DATA_FILE", "data.json")

# Directory where uploaded photos are stored and served from
PHOTOS_DIR = os.getenv("PHOTOS_DIR", "photos")

# ----- Auth / JWT -----
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_THIS_SECRET_IN_REAL_PROJECT")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ----- Rate limiting -----
RATE_LIMIT = os.getenv("RATE_LIMIT", "120/minute")
RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", "true")

# Number of days covered by an availability map
AVAILABILITY_WINDOW_DAYS = int(os.getenv("AVAILABILITY_WINDOW_DAYS", "90"))

# Upload size cap (10MB)
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

# Format: CORS_ORIGINS=https://a.example,https://b.example
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# ----- Logging -----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# ----- Server -----
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
