"""
Global application state
Shared resources accessible across all modules
"""
from typing import Optional

from quizgo.config import Settings
from quizgo.services.ocr import OcrResultCache
from quizgo.storage import JsonBlobStore

# Loaded at startup (main.lifespan)
SETTINGS: Settings = Settings()

# Document store for quizzes and submissions
STORE: Optional[JsonBlobStore] = None

# Document AI results keyed by upload fingerprint, so re-uploading the same
# sheet does not call the paid OCR service twice
OCR_CACHE: OcrResultCache = OcrResultCache()


def get_store() -> JsonBlobStore:
    if STORE is None:
        raise RuntimeError("Store is not initialised")
    return STORE
