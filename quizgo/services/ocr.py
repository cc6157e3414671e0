"""
Document AI client for scanned answer sheets

Flow:
  PDF bytes -> base64 -> POST {location}-documentai.googleapis.com/...:process
  response JSON -> quizgo.core.answer_sheet.parse_document -> [{number, text}]

Results are memoized by upload fingerprint (file name, size, sha256) so the
same sheet is never sent to the paid service twice. The cache belongs to the
caller (see state.OCR_CACHE), not to the scoring code.
"""
import base64
import hashlib
import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

import httpx

from quizgo.config import DocumentAISettings
from quizgo.errors import OcrNotConfiguredError, OcrUpstreamError


logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

Fingerprint = Tuple[str, int, str]


def fingerprint(file_name: str, content: bytes) -> Fingerprint:
    return (file_name or "", len(content), hashlib.sha256(content).hexdigest())


class OcrResultCache:
    """Small LRU of Document AI responses keyed by upload fingerprint"""

    def __init__(self, max_entries: int = 64):
        self.max_entries = max_entries
        self._entries: "OrderedDict[Fingerprint, Dict[str, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Fingerprint) -> Optional[Dict[str, Any]]:
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key: Fingerprint, value: Dict[str, Any]) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class DocumentAIClient:
    """Thin async wrapper around the Document AI `process` endpoint"""

    def __init__(self, settings: DocumentAISettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    async def process_pdf(self, content: bytes) -> Dict[str, Any]:
        """
        Send one PDF to Document AI

        Returns:
            Parsed JSON response

        Raises:
            OcrNotConfiguredError: If location/project/processor/token are missing
            OcrUpstreamError: On transport failure, non-2xx or non-JSON response
        """
        if not self.settings.is_configured:
            raise OcrNotConfiguredError(
                "Document AI is not configured (LOCATION, PROJECT_ID, PROCESSOR_ID, DOCUMENTAI_ACCESS_TOKEN)"
            )

        payload = {
            "skipHumanReview": True,
            "rawDocument": {
                "mimeType": PDF_MIME_TYPE,
                "content": base64.b64encode(content).decode("ascii"),
            },
        }
        headers = {"Authorization": f"Bearer {self.settings.access_token}"}

        try:
            async with httpx.AsyncClient(timeout=self.settings.timeout, transport=self._transport) as client:
                response = await client.post(self.settings.process_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"❌ Document AI request failed: {type(e).__name__}: {e}")
            raise OcrUpstreamError("Failed to call Document AI endpoint") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        logger.info(f"📄 Document AI response: status={response.status_code}")

        if response.status_code >= 400:
            message = None
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                message = data["error"].get("message")
            raise OcrUpstreamError(
                f"Document AI call failed (HTTP {response.status_code}): {message or response.text[:500]}",
                status_code=502,
            )
        if not isinstance(data, dict):
            raise OcrUpstreamError("Non-JSON response from Document AI")
        return data


async def process_with_cache(
    client: DocumentAIClient, cache: OcrResultCache, file_name: str, content: bytes
) -> Dict[str, Any]:
    key = fingerprint(file_name, content)
    cached = cache.get(key)
    if cached is not None:
        logger.info(f"♻️ Document AI cache hit for {file_name} ({len(content)} bytes)")
        return cached

    result = await client.process_pdf(content)
    cache.put(key, result)
    return result
