"""
Health check and system status endpoints
"""
from fastapi import APIRouter
from quizgo import state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "QuizGo Scoring Server",
        "version": "1.0.0",
        "store_ready": state.STORE is not None,
        "ocr_configured": state.SETTINGS.documentai.is_configured,
        "question_import_configured": state.SETTINGS.vertex.is_configured,
    }
