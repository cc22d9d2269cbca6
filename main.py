from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from core.config import settings
from core.database import ensure_indexes
from core.dependencies import cache_warmer, token_service
from core.errors import register_error_handlers
from core.logging import LOGGER_NAME, configure_logging
from core.scheduler import start_scheduler, stop_scheduler
from routes import auth, cache, habits, health

configure_logging(settings.ENV, settings.LOG_LEVEL)
logger = logging.getLogger(LOGGER_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_indexes()
    if settings.SCHEDULER_ENABLED:
        # Token sweep and cache warming run once now, then on their intervals
        start_scheduler(token_service, cache_warmer)
    logger.info("Application started", extra={"env": settings.ENV})
    yield
    stop_scheduler()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS
origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000", # Common alternative
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routers
app.include_router(auth.router)
app.include_router(habits.router)
app.include_router(cache.router)
app.include_router(health.router)

@app.get("/")
def read_root():
    return {"message": "Welcome to StreakKeeper API"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
