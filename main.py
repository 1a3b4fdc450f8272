from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from dotenv import load_dotenv
from pymongo.errors import PyMongoError

# Load environment variables from .env file FIRST
env_path = os.path.join(os.path.dirname(__file__), '.env')
load_dotenv(dotenv_path=env_path)

from talentmatch.config import settings, validate_settings
from talentmatch.infra.mongodb import close_database, get_database
from talentmatch.infra.mongodb.repositories import ensure_indexes
from talentmatch.routes import placements_router, profilers_router, tickets_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_settings()
    try:
        ensure_indexes()
        logger.info("MongoDB indexes ensured")
    except PyMongoError as e:
        logger.error(f"Could not create MongoDB indexes: {e}")
        raise
    yield
    close_database()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


@app.get("/health")
def health():
    try:
        get_database().command("ping")
        database = "connected"
    except PyMongoError as e:
        logger.warning(f"Health check: MongoDB unreachable: {e}")
        database = "unreachable"
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
    }


app.include_router(tickets_router)
app.include_router(profilers_router)
app.include_router(placements_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level="info",
    )
