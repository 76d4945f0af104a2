from fastapi import FastAPI
import logging

from tictactoe_live import __version__
from tictactoe_live.api.deps import build_services
from tictactoe_live.api.routes import router
from tictactoe_live.config import load_env_file, settings_from_env

load_env_file()
settings = settings_from_env()

app = FastAPI(title="tictactoe-live", version=__version__)
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    # One store per process; rooms do not survive a restart.
    app.state.services = build_services(settings=settings)
    logger.info("Room store ready (code attempts=%d)", settings.room_code_attempts)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "tictactoe-live", "version": __version__}
