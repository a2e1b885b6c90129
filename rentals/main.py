import logging
import os

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded

from . import config
from .deps import get_store
from .error_handlers import register_exception_handlers
from .routers import bookings, data, groups, logs, photos, properties, public, users
from .store import DocumentStore

# -----------------------------------------
# Logging
# -----------------------------------------
logging.basicConfig(
    format=config.LOG_FORMAT,
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)

# -----------------------------------------
# Rate Limiter
# -----------------------------------------
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[config.RATE_LIMIT],
    enabled=config.RATE_LIMIT_ENABLED,
)

app = FastAPI(
    title="Vacation Rentals Backend",
    version="0.1.0",
    description="Properties, bookings, users and groups for a vacation-rental business.",
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Rate limit exceeded. Please try again later.",
            "error": "too_many_requests",
            "path": str(request.url.path),
        },
    )


# -----------------------------------------
# Routers (normal + versioned /api/v1)
# -----------------------------------------
for router in (
    users.router,
    groups.router,
    properties.router,
    bookings.router,
    logs.router,
    photos.router,
    public.router,
    data.router,
):
    app.include_router(router)
    app.include_router(router, prefix="/api/v1")

# Uploaded photos
os.makedirs(config.PHOTOS_DIR, exist_ok=True)
app.mount("/photos", StaticFiles(directory=config.PHOTOS_DIR), name="photos")

logger.info("Data file: %s, photos directory: %s", config.DATA_FILE, config.PHOTOS_DIR)


# -----------------------------------------
# Health check endpoint
# -----------------------------------------
@app.get("/health", tags=["health"])
def health_check(store: DocumentStore = Depends(get_store)):
    counts = store.load().table_counts()
    return {
        "status": "ok",
        "tables": [{"name": name, "count": count} for name, count in counts.items()],
    }


if __name__ == "__main__":
    uvicorn.run("rentals.main:app", host=config.HOST, port=config.PORT)
