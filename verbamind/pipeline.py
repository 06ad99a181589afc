"""Speech pipeline: generate, verify, score, refine, humanize."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from config.config_loader import load_config
from verbamind.models import ApiKeys, GenerationResult, SpeechParams, VerificationResult
from verbamind.parsing import parse_verdict, round_half_up
from verbamind.prompts import (
    build_generation_prompt,
    build_humanization_prompt,
    build_logic_prompt,
    build_naturalness_prompt,
    build_refinement_prompt,
    build_style_prompt,
)
from verbamind.providers.base import NoProviderAvailable, TextGenerationProvider
from verbamind.selector import build_providers, call_best_available

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

DEFAULT_SCORE = 90
REFINE_THRESHOLD = 85
REFINED_BONUS = 5
REFINED_SCORE_CAP = 98

MSG_GENERATING = "Generating speech..."
MSG_VERIFYING = "Verifying quality..."
MSG_STYLE = "Analyzing style..."
MSG_LOGIC = "Checking logic..."
MSG_REFINING = "Refining text..."
MSG_POLISHING = "Polishing text..."
MSG_DONE = "Done!"


def overall_score(results: list[VerificationResult]) -> int:
    """Rounded mean of the stage scores, DEFAULT_SCORE when there are none."""
    if not results:
        return DEFAULT_SCORE
    return round_half_up(sum(r.score for r in results) / len(results))


def boost_score(score: int) -> int:
    """Score reported after a successful refinement. Not a re-measurement."""
    return min(score + REFINED_BONUS, REFINED_SCORE_CAP)


def flatten_feedback(results: list[VerificationResult]) -> list[str]:
    return [item for r in results for item in r.feedback]


async def _verify_stage(
    aspect: str,
    prompt: str,
    preferred: str,
    credentials: ApiKeys,
    providers: dict[str, TextGenerationProvider],
) -> VerificationResult | None:
    """Run one judge call. Returns None when no provider answered."""
    try:
        raw = await call_best_available(credentials, prompt, preferred, providers)
    except NoProviderAvailable as exc:
        logger.warning("%s check failed: %s", aspect.capitalize(), exc)
        return None
    verdict = parse_verdict(raw)
    logger.info("%s check: score %d, %d notes", aspect.capitalize(), verdict.score, len(verdict.feedback))
    return VerificationResult(aspect=aspect, score=verdict.score, feedback=verdict.feedback)


async def _verify(
    speech: str,
    params: SpeechParams,
    credentials: ApiKeys,
    providers: dict[str, TextGenerationProvider],
    on_progress: ProgressCallback,
) -> list[VerificationResult]:
    """Naturalness, style and logic checks, in that order. Best-effort."""
    results: list[VerificationResult] = []
    if not credentials.available():
        return results

    stages = [
        (MSG_VERIFYING, "naturalness", build_naturalness_prompt(speech), "claude"),
        (MSG_STYLE, "style", build_style_prompt(speech, params.tone), "openai"),
        (MSG_LOGIC, "logic", build_logic_prompt(speech), "gemini"),
    ]
    for message, aspect, prompt, preferred in stages:
        on_progress(message)
        result = await _verify_stage(aspect, prompt, preferred, credentials, providers)
        if result is not None:
            results.append(result)
    return results


async def generate_speech(
    params: SpeechParams,
    credentials: ApiKeys,
    on_progress: ProgressCallback,
    fast_mode: bool = True,
    *,
    providers: dict[str, TextGenerationProvider] | None = None,
) -> GenerationResult:
    """Run the full pipeline and return the final result.

    Args:
        params: What to write about and for whom.
        credentials: Per-provider API keys; any subset may be missing.
        on_progress: Called with a status string before each stage's call.
        fast_mode: Skip the three verification checks.
        providers: Adapters keyed by provider name. Built from settings.yaml
            when omitted.

    Returns:
        GenerationResult owned by the caller.

    Raises:
        NoProviderAvailable: If no provider could produce the initial speech.
    """
    if providers is None:
        providers = build_providers(load_config())

    on_progress(MSG_GENERATING)
    logger.info("Generating speech on %r (%s, %s)", params.topic, params.tone.value, params.duration.value)
    text = await call_best_available(credentials, build_generation_prompt(params), "claude", providers)

    verification_results: list[VerificationResult] = []
    if fast_mode:
        logger.info("Fast mode: skipping verification")
    else:
        verification_results = await _verify(text, params, credentials, providers, on_progress)

    score = overall_score(verification_results)
    logger.info("Overall score %d from %d checks", score, len(verification_results))

    was_refined = False
    if score < REFINE_THRESHOLD and verification_results:
        on_progress(MSG_REFINING)
        prompt = build_refinement_prompt(text, flatten_feedback(verification_results), params)
        try:
            text = await call_best_available(credentials, prompt, "claude", providers)
            was_refined = True
        except NoProviderAvailable as exc:
            logger.warning("Refinement failed, keeping original: %s", exc)

    on_progress(MSG_POLISHING)
    try:
        text = await call_best_available(credentials, build_humanization_prompt(text), "gemini", providers)
    except NoProviderAvailable as exc:
        logger.warning("Humanization failed, keeping previous text: %s", exc)

    on_progress(MSG_DONE)

    return GenerationResult(
        text=text,
        verification_results=verification_results,
        overall_score=boost_score(score) if was_refined else score,
        was_refined=was_refined,
        generated_at=datetime.now(timezone.utc),
    )
