"""
Question import: pasted round text -> structured questions via Gemini on Vertex AI

Flow:
  ruleset + text -> ruleset-specific system prompt -> POST :streamGenerateContent
  streamed JSON events -> concatenated model text -> JSON array
  -> [ImportedQuestion(text, options, correctAnswer)]

correctAnswer is coerced to the ruleset's stored shape ("A".."D", a number, or
{bg, en}), so imported questions can be saved into a round as they are.
"""
import json
import logging
import re
from typing import Any, List, Optional

import httpx

from quizgo.config import VertexSettings
from quizgo.errors import QuestionImportError, QuestionImportNotConfiguredError
from quizgo.models import ImportedQuestion, Ruleset, coerce_correct_answer, correct_answer_to_json


logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 2000

_CODE_FENCE = re.compile(r"```(?:json)?\s*")


def build_system_prompt(ruleset: Ruleset) -> str:
    return "\n".join([
        "You are helping build a quiz round in a trivia app.",
        "Input: a blob of text that contains multiple questions and their correct answers, "
        "possibly with formatting, separators, or annotations.",
        "",
        f"The quiz round ruleset is: {Ruleset(ruleset).value}.",
        "",
        "Task:",
        "- Split the text into individual questions.",
        '- Infer how answers are denoted in the text (e.g., after "Answer:", highlighted, in parentheses, etc.).',
        "- Return ONLY JSON (no markdown) representing an array of questions.",
        "",
        "Output JSON schema (array):",
        "[",
        "  {",
        '    "text": string,',
        '    "options"?: string[] (ONLY for multiple-choice; include 4 options in A/B/C/D order if possible),',
        '    "correctAnswer":',
        '      - for multiple-choice: one of "A"|"B"|"C"|"D" (or а, б, в, г)',
        "      - for number: number",
        '      - for free-text: { "bg": string, "en": string } (if only one language present, '
        "copy it to both or leave the missing one empty)",
        "  }",
        "]",
        "",
        "Rules:",
        "- Do not include explanations.",
        "- Preserve question wording.",
        '- If options are present, keep them clean (no leading labels like "A)" unless unavoidable).',
    ])


def snippet(value: Any, max_length: int = SNIPPET_LENGTH) -> str:
    text = "" if value is None else str(value)
    return text if len(text) <= max_length else f"{text[:max_length]}…"


def _loads_with_salvage(text: str, open_char: str, close_char: str) -> Any:
    """json.loads, falling back to the outermost open_char..close_char slice"""
    try:
        return json.loads(text)
    except ValueError:
        first = text.find(open_char)
        last = text.rfind(close_char)
        if first < 0 or last <= first:
            raise
        return json.loads(text[first:last + 1])


def _event_text(event: Any) -> str:
    """Concatenated `candidates[0].content.parts[].text` of one stream event"""
    if not isinstance(event, dict):
        return ""
    candidates = event.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    if not isinstance(content, dict) or not isinstance(content.get("parts"), list):
        return ""
    return "".join(
        part["text"] for part in content["parts"]
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


def extract_stream_text(raw_body: str) -> str:
    """
    Join the model text from a streamGenerateContent response body

    The body is usually one JSON array of events; a single event object is
    accepted too.

    Raises:
        ValueError: If the body is not JSON
    """
    body = raw_body.strip()
    if not body:
        return ""
    parsed = _loads_with_salvage(body, "[", "]")
    events = parsed if isinstance(parsed, list) else [parsed]
    return "".join(_event_text(event) for event in events).strip()


def parse_model_json(text: str) -> Any:
    """
    Parse the model's answer as JSON

    Markdown code fences are dropped; otherwise the first array (or object)
    embedded in the text is used.

    Raises:
        ValueError: If no JSON can be recovered
    """
    cleaned = _CODE_FENCE.sub("", text).strip()
    if not cleaned:
        raise ValueError("Empty model output")
    try:
        return _loads_with_salvage(cleaned, "[", "]")
    except ValueError:
        return _loads_with_salvage(cleaned, "{", "}")


def clean_questions(ruleset: Ruleset, items: List[Any]) -> List[ImportedQuestion]:
    """Keep items with non-empty text; trim options; coerce correctAnswer for the ruleset"""
    questions = []
    for item in items:
        if not isinstance(item, dict):
            continue
        text = item.get("text").strip() if isinstance(item.get("text"), str) else ""
        if not text:
            continue

        options: Optional[List[str]] = None
        if isinstance(item.get("options"), list):
            options = [o.strip() for o in item["options"] if isinstance(o, str) and o.strip()]

        correct = correct_answer_to_json(coerce_correct_answer(ruleset, item.get("correctAnswer")))
        questions.append(ImportedQuestion(text=text, options=options, correctAnswer=correct))
    return questions


class QuestionImportClient:
    """Async wrapper around Gemini `streamGenerateContent` for round imports"""

    def __init__(self, settings: VertexSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _payload(self, ruleset: Ruleset, text: str) -> dict:
        return {
            "systemInstruction": {"role": "system", "parts": [{"text": build_system_prompt(ruleset)}]},
            "contents": [{"role": "user", "parts": [{"text": text}]}],
            "generationConfig": {
                "temperature": self.settings.temperature,
                "maxOutputTokens": self.settings.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }

    async def parse_round_questions(self, ruleset: Ruleset, text: str) -> List[ImportedQuestion]:
        """
        Turn pasted round text into questions

        Raises:
            QuestionImportNotConfiguredError: If VERTEX_API_KEY is missing
            QuestionImportError: On transport failure, non-2xx response or
                output that does not contain any questions
        """
        if not self.settings.is_configured:
            raise QuestionImportNotConfiguredError("Missing VERTEX_API_KEY in environment.")

        try:
            async with httpx.AsyncClient(timeout=self.settings.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.settings.generate_url,
                    params={"key": self.settings.api_key},
                    json=self._payload(ruleset, text),
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Vertex request failed: {type(e).__name__}: {e}")
            raise QuestionImportError("Failed to call Vertex", status_code=500) from e

        logger.info(f"🤖 Vertex response: status={response.status_code}")

        if response.status_code >= 400:
            message = None
            try:
                error = response.json().get("error")
                if isinstance(error, dict):
                    message = error.get("message")
            except (ValueError, AttributeError):
                pass
            raise QuestionImportError(
                f"Vertex call failed (HTTP {response.status_code})",
                details=message or snippet(response.text),
            )

        try:
            model_text = extract_stream_text(response.text)
        except ValueError as e:
            logger.error(f"❌ Vertex body was not JSON: {snippet(response.text, 200)!r}")
            raise QuestionImportError(
                "Vertex response was not valid JSON", status_code=500, details=snippet(response.text)
            ) from e

        try:
            parsed = parse_model_json(model_text)
        except ValueError as e:
            logger.error(f"❌ Model output was not JSON: {snippet(model_text, 200)!r}")
            raise QuestionImportError(
                "Model output was not valid JSON", status_code=500, details=snippet(model_text)
            ) from e

        if not isinstance(parsed, list):
            raise QuestionImportError("Model did not return a JSON array.", details=snippet(model_text))

        questions = clean_questions(ruleset, parsed)
        if not questions:
            raise QuestionImportError(
                "No questions were parsed from the model output.", details=snippet(model_text)
            )

        logger.info(f"📝 Imported {len(questions)} {Ruleset(ruleset).value} questions")
        return questions
