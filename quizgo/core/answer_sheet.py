"""
Answer-sheet parser for OCR (Document AI) output

Entity format (extra fields ignored):
    {"type": "answer", "mentionText": "3. Paris"}

Only entities of type "answer" whose text starts with "<ASCII digits>." are kept:
    "3. Paris"   -> (3, "Paris")
    "12.  "      -> (12, "")
    "Paris"      -> discarded
    "٣. Paris"   -> discarded
"""
import logging
import math
import re
from typing import Any, List, Mapping

from quizgo.models import OcrEntity, ParsedAnswer


logger = logging.getLogger(__name__)

ANSWER_ENTITY_TYPE = "answer"
ANSWER_LINE_PATTERN = re.compile(r"^([0-9]+)\.(.*)$", re.DOTALL)


def _entity_fields(entity: Any):
    if isinstance(entity, OcrEntity):
        return entity.type, entity.mention_text
    if isinstance(entity, Mapping):
        return entity.get("type"), entity.get("mentionText")
    return None, None


def parse_answers(entities: List[Any]) -> List[ParsedAnswer]:
    """
    Extract numbered answers from OCR entities

    Args:
        entities: OcrEntity models or raw entity dicts

    Returns:
        ParsedAnswer list sorted ascending by number (stable, duplicates kept)
    """
    parsed: List[ParsedAnswer] = []

    for entity in entities or []:
        entity_type, mention = _entity_fields(entity)
        if entity_type != ANSWER_ENTITY_TYPE or not isinstance(mention, str):
            continue

        match = ANSWER_LINE_PATTERN.match(mention.strip())
        if not match:
            logger.debug(f"Discarding unnumbered answer entity: {mention!r}")
            continue

        number = float(match.group(1))
        if not math.isfinite(number):
            continue

        parsed.append(ParsedAnswer(number=int(number), text=match.group(2).strip()))

    parsed.sort(key=lambda item: item.number)
    return parsed


def extract_entities(document_json: Any) -> List[Any]:
    """Return `document.entities` from a Document AI process response ([] if absent)"""
    if not isinstance(document_json, Mapping):
        return []
    document = document_json.get("document")
    if not isinstance(document, Mapping):
        return []
    entities = document.get("entities")
    return entities if isinstance(entities, list) else []


def parse_document(document_json: Any) -> List[ParsedAnswer]:
    """Parse answers straight from a Document AI process response"""
    return parse_answers(extract_entities(document_json))
