"""
FastAPI main application
QuizGo - quiz management and scoring server

Modular architecture with separated API routers in quizgo/api/:
- health.py: Health check and system status
- quizzes.py: Quiz CRUD (rounds, questions, ruleset switching)
- submissions.py: Team answer submissions (upsert per team/round)
- leaderboard.py: Ranked leaderboard for all rounds or one round
- answer_sheets.py: OCR output -> numbered answers for submission drafts
- question_import.py: Pasted round text -> questions (Gemini on Vertex AI)

All routers access shared state via quizgo.state module.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from quizgo import state
from quizgo.config import load_settings
from quizgo.storage import JsonBlobStore

# Import all API routers
from quizgo.api import health, quizzes, submissions, leaderboard, answer_sheets, question_import


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: settings + document store into global state
    try:
        state.SETTINGS = load_settings()
        if state.STORE is None:
            state.STORE = JsonBlobStore(state.SETTINGS.data_dir, state.SETTINGS.blob_prefix)
        logger.info(f"✅ Server started with store at {state.STORE.root}/{state.STORE.prefix}")
        if not state.SETTINGS.documentai.is_configured:
            logger.warning("⚠️ Document AI not configured; /api/answer-sheets/ocr will return 500")
        if not state.SETTINGS.vertex.is_configured:
            logger.warning("⚠️ VERTEX_API_KEY not set; /api/question-import will return 500")
    except Exception as e:
        logger.error(f"❌ Failed to initialise server: {e}")
        raise

    yield

    # Shutdown
    state.OCR_CACHE.clear()
    logger.info("🛑 Server shutting down")


# Create FastAPI app
app = FastAPI(
    title="QuizGo - Scoring Server",
    description="Quiz management, answer submissions and leaderboards",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Quiz management (GET/POST /api/quizzes, DELETE rounds/questions, PUT ruleset)
app.include_router(quizzes.router)

# Submissions (GET/POST /api/submissions)
app.include_router(submissions.router)

# Leaderboard (GET /api/quizzes/{id}/leaderboard)
app.include_router(leaderboard.router)

# Answer sheets (POST /api/answer-sheets/parse, /api/answer-sheets/ocr)
app.include_router(answer_sheets.router)

# Question import (POST /api/question-import)
app.include_router(question_import.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
