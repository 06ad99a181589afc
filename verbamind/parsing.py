"""Extract a {score, feedback} verdict from a judge model's free-form reply."""

import json
import logging
import math
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FALLBACK_SCORE = 85
FALLBACK_FEEDBACK = "response could not be parsed"

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


@dataclass(frozen=True)
class Verdict:
    score: int
    feedback: tuple[str, ...]


FALLBACK_VERDICT = Verdict(score=FALLBACK_SCORE, feedback=(FALLBACK_FEEDBACK,))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markers wherever they appear."""
    return _FENCE_RE.sub("", text).strip()


def parse_verdict(raw: str) -> Verdict:
    """Parse a verdict, returning FALLBACK_VERDICT on any malformed input. Never raises."""
    cleaned = strip_code_fences(raw or "")
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Judge response is not JSON: %.80r", cleaned)
        return FALLBACK_VERDICT

    if not isinstance(data, dict):
        logger.warning("Judge response is not a JSON object: %.80r", cleaned)
        return FALLBACK_VERDICT

    score = data.get("score")
    feedback = data.get("feedback")
    # bool is an int subclass; "true" is not a score
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        logger.warning("Judge response has no numeric score: %r", score)
        return FALLBACK_VERDICT
    if not isinstance(feedback, list):
        logger.warning("Judge response has no feedback list")
        return FALLBACK_VERDICT

    items = tuple(str(item).strip() for item in feedback if str(item).strip())
    return Verdict(score=min(100, max(0, round_half_up(score))), feedback=items)
