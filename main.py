from fastapi import FastAPI
from mirai.api.v1.endpoints import resume, users
from mirai.core.config import settings
from mirai.db.session import engine
from contextlib import asynccontextmanager
import logging

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Mirai API starting")
    yield
    engine.dispose()

app = FastAPI(title="Mirai Career Coach API", version="0.1.0", lifespan=lifespan)
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(resume.router, prefix="/api/v1/resume", tags=["resume"])

@app.get("/health", tags=["health"]) 
async def health():
    """Health check endpoint returning service status."""
    return {"status": "ok"}
