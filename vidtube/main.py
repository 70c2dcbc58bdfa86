# main.py
import logging

import uvicorn
from fastapi import FastAPI

from vidtube import __version__, config
from vidtube.db.connection import get_store
from vidtube.db.init_collections import init_collections
from vidtube.http_api.logging_middleware import LoggingMiddleware
from vidtube.http_api.rate_limiter import RateLimitMiddleware
from vidtube.http_api.router import router as api_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="vidtube API",
    version=__version__
)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(LoggingMiddleware)

app.include_router(api_router, prefix="/api/v1", tags=["API v1"])

def init_database():
    """Create indexes; unique indexes carry the edge invariants, so a failure stops startup"""
    logger.info("🗄️  Initializing database...")
    if not init_collections(get_store(), insert_samples=config.SEED_SAMPLE_DATA):
        raise RuntimeError("Database initialization failed")

@app.on_event("startup")
def startup_event():
    init_database()
    logger.info("🚀 Server startup complete!")

def run():
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)

if __name__ == "__main__":
    run()
