import json
import logging
from typing import Dict

from .error_handling import ResponseParseError
from .models import AnalysisResult, ChecklistResult
from .prompts import SINTA_REQUIREMENTS

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def extract_json_object(raw_text: str) -> Dict:
    """Return the first well-formed top-level JSON object embedded in raw_text.

    Every '{' is tried as a start position, so braces in the surrounding prose
    are skipped instead of swallowing the real payload.
    """
    if not isinstance(raw_text, str):
        raise ResponseParseError("Model response is not text", raw_text=repr(raw_text))

    start = raw_text.find("{")
    while start != -1:
        try:
            payload, _ = _decoder.raw_decode(raw_text, start)
        except json.JSONDecodeError:
            start = raw_text.find("{", start + 1)
            continue
        if isinstance(payload, dict):
            return payload
        start = raw_text.find("{", start + 1)

    logger.error(f"No JSON object found in model response ({len(raw_text)} chars)")
    raise ResponseParseError("No JSON object found in model response", raw_text=raw_text)


def parse_analysis_result(raw_text: str) -> AnalysisResult:
    payload = extract_json_object(raw_text)
    try:
        return AnalysisResult.from_dict(payload)
    except ResponseParseError as e:
        logger.error(f"Invalid analysis payload: {e.message}")
        raise ResponseParseError(f"Failed to parse analysis result: {e.message}", raw_text=raw_text) from e


def parse_checklist_result(raw_text: str) -> ChecklistResult:
    payload = extract_json_object(raw_text)
    try:
        result = ChecklistResult.from_dict(payload, expected_total=len(SINTA_REQUIREMENTS))
    except ResponseParseError as e:
        logger.error(f"Invalid checklist payload: {e.message}")
        raise ResponseParseError(f"Failed to parse checklist result: {e.message}", raw_text=raw_text) from e

    if len(result.items) != result.total_count:
        logger.warning(f"Checklist lists {len(result.items)} items for {result.total_count} requirements")
    return result


def clean_debate_topic(raw_text: str) -> str:
    """Strip the 'Topic:' prefix and wrapping quotes the model tends to add"""
    topic = raw_text.strip().strip('"').strip()
    topic = topic.replace("Topic:", "", 1).strip()
    topic = topic.strip('"').strip()
    if not topic:
        raise ResponseParseError("Model returned an empty debate topic", raw_text=raw_text)
    return topic
