import argparse
import logging
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from db.store import StudyStore
from config import load_config
from routes import decks_router, cards_router, study_router, quiz_router
from utils.media import MediaStore
from utils.timing import TimingHeuristic

logger = logging.getLogger(__name__)

# First-run init; services are built once and shared through app.state
@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()  # Ensures config exists
    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    store = StudyStore()
    app.state.store = store
    app.state.timing = TimingHeuristic(store=store)
    app.state.media = MediaStore(Path(config["media"]["directory"]))
    app.state.sessions = {}
    app.state.quizzes = {}
    logger.info("flashstudy ready, media in %s", config["media"]["directory"])
    yield
    app.state.sessions.clear()
    app.state.quizzes.clear()

app = FastAPI(title="flashstudy", description="Personal flashcard study app", lifespan=lifespan)

# Include routers
app.include_router(decks_router, prefix="/decks", tags=["decks"])
app.include_router(cards_router, prefix="/decks", tags=["cards"])  # /decks/{deck_id}/cards
app.include_router(study_router, prefix="/study", tags=["study"])
app.include_router(quiz_router, prefix="/quiz", tags=["quiz"])

@app.get("/")
async def home():
    return {"app": "flashstudy", "docs": "/docs"}

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="flashstudy App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    if args.init:
        logging.basicConfig(level=config["logging"]["level"])
        init_db()
        print("DB initialized and config copied to ~/.flashstudy/")
        exit(0)
    # Run server
    uvicorn.run(
        "main:app",
        host=config["server"]["host"],
        port=config["server"]["port"],
        reload=args.dev,
        log_level=config["logging"]["level"].lower(),
    )
