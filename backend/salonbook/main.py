import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .config import settings
from .database import init_db
from .redis_client import redis_client
from .routers import appointments, salons
from .services.scheduling.errors import PersistenceFailure, SchedulingError

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    logger.info("Salon booking API started")
    yield


app = FastAPI(title="Salon Booking API", lifespan=lifespan)

app.include_router(salons.router)
app.include_router(appointments.router)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    if isinstance(exc, PersistenceFailure):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)

    content = {"success": False, "message": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health")
def health():
    redis_ok = None
    if redis_client is not None:
        try:
            redis_ok = bool(redis_client.ping())
        except RedisError:
            logger.exception("Redis health check failed")
            redis_ok = False
    return {"status": "ok", "redis": redis_ok}
