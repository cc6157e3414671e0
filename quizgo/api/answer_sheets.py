"""
Answer-sheet endpoints: turn OCR output into a submission draft
"""
from typing import Any, Dict

from fastapi import APIRouter, File, HTTPException, UploadFile
import logging

from quizgo import state
from quizgo.core.answer_sheet import parse_document
from quizgo.errors import OcrNotConfiguredError, OcrUpstreamError
from quizgo.services.ocr import PDF_MIME_TYPE, DocumentAIClient, process_with_cache


router = APIRouter(prefix="/api/answer-sheets", tags=["answer-sheets"])
logger = logging.getLogger(__name__)


def _answers_payload(document_json: Any) -> Dict:
    answers = parse_document(document_json)
    return {"answers": [a.model_dump() for a in answers], "count": len(answers)}


@router.post("/parse")
async def parse_answer_sheet(document_json: Dict[str, Any]):
    """
    Parse a Document AI `process` response into numbered answers

    Request: the raw Document AI JSON ({"document": {"entities": [...]}})
    Response: {"answers": [{"number": 1, "text": "Rome"}, ...], "count": 1}
    """
    return _answers_payload(document_json)


@router.post("/ocr")
async def ocr_answer_sheet(file: UploadFile = File(...)):
    """Upload a scanned PDF sheet, OCR it with Document AI and parse the answers"""
    mime_type = file.content_type or PDF_MIME_TYPE
    if mime_type != PDF_MIME_TYPE:
        raise HTTPException(status_code=400, detail=f"Expected {PDF_MIME_TYPE}, got {mime_type}")

    content = await file.read()
    client = DocumentAIClient(state.SETTINGS.documentai)
    try:
        document_json = await process_with_cache(client, state.OCR_CACHE, file.filename or "", content)
    except OcrNotConfiguredError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except OcrUpstreamError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    return _answers_payload(document_json)
