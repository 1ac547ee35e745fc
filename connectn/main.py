from fastapi import FastAPI
import logging

from connectn.api.deps import get_redis, get_registry
from connectn.api.routes import router
from connectn.settings import get_settings

app = FastAPI(title="connectn", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    # No socket outlives the process, so sessions from a previous run are unreachable.
    redis_provider = app.dependency_overrides.get(get_redis, get_redis)
    for r in redis_provider():
        get_registry(r).purge()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "connectn", "version": "0.1.0"}
