import logging
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ytfetch.core.config import settings
from ytfetch.core.database import Base, engine
from ytfetch.scheduler import FetchCoordinator
from ytfetch.api import videos

from ytfetch.models import *

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


app = FastAPI(title="ytfetch")

# -------------------------
# CORS
# -------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept"],
)

# -------------------------
# Include Routers
# -------------------------
app.include_router(videos.router)

# Built on startup; NoAPIKeysError there aborts the process
coordinator: FetchCoordinator | None = None

# -------------------------
# FastAPI lifecycle
# -------------------------

@app.on_event("startup")
def startup():
    global coordinator

    Base.metadata.create_all(bind=engine)

    coordinator = FetchCoordinator()
    coordinator.start()
    logger.info(f"Started background fetch for query: {settings.SEARCH_QUERY}")

@app.on_event("shutdown")
def shutdown():
    if coordinator is not None and coordinator.running:
        coordinator.stop()

# -------------------------
# Routes
# -------------------------

@app.get("/")
def root():
    if coordinator is None:
        return {"status": "running", "fetcher": "stopped"}

    body = {"status": "running", "fetcher": "running" if coordinator.running else "stopped"}
    keys = coordinator.key_status()
    if keys is not None:
        body["keys"] = keys
    return body

# Manual trigger (admin)
@app.post("/run/youtube")
def run_youtube_now():
    if coordinator is None:
        raise HTTPException(status_code=503, detail="Fetcher not initialised")

    stored = coordinator.run_once()
    if stored is None:
        status = "failed" if coordinator.last_error else "skipped"
        return {"status": status, "stored": 0}
    return {"status": "completed", "stored": stored}
