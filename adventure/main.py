from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
import logging

from adventure.api.routes import router
from adventure.assets.registry import get_catalog
from adventure.session_store import registry
from adventure.settings import load_dotenv_if_present, load_settings

load_dotenv_if_present()
settings = load_settings()

app = FastAPI(title="adventure", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Serve the minimal browser client (no build step).
from pathlib import Path

_static_dir = Path(__file__).resolve().parent / "static"
if _static_dir.exists():
    app.mount("/ui", StaticFiles(directory=str(_static_dir), html=True), name="ui")


@app.on_event("startup")
async def _startup() -> None:
    # Fail fast on a bad catalog in strict mode instead of on the first request.
    get_catalog()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await registry.close_all()


@app.get("/")
async def _root() -> RedirectResponse:
    return RedirectResponse(url="/ui/")


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "adventure", "version": "0.1.0"}
