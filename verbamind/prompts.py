"""Prompt templates. Pure string builders, no I/O."""

from verbamind.models import SpeechParams, Tone

# Generic transitions that make a speech sound machine-written.
AI_TRANSITION_PHRASES = (
    "Podsumowując",
    "Warto zauważyć",
    "W dzisiejszych czasach",
    "Nie da się ukryć",
    "Co więcej",
    "Reasumując",
    "Należy podkreślić",
    "W obliczu",
    "Kluczowe jest",
    "Na zakończenie warto",
)

_JSON_REPLY = (
    "Reply ONLY with JSON (no markdown):\n"
    '{ "score": <number 0-100>, "feedback": ["note 1", "note 2"] }'
)

_GENERATION_TEMPLATE = """You are a professional speechwriter. Write a speech in Polish that meets these requirements:

TOPIC: {topic}
TONE: {tone}
LENGTH: {duration}
AUDIENCE: {audience}
{details_line}
RULES:
1. Write natural, fluent Polish
2. Avoid typical AI phrases such as "Podsumowując...", "Warto zauważyć...", "W dzisiejszych czasach..."
3. Keep the structure: opening hook -> body -> strong close
4. Match vocabulary and complexity to the audience
5. Use rhetorical questions, anecdotes and metaphors where they fit
6. The text must be ready to be read aloud, so avoid complicated constructions
7. Keep a length appropriate for {duration}

Write ONLY the speech, with no comments or meta-information."""

_NATURALNESS_TEMPLATE = """You are an expert in natural spoken Polish.
Analyse the speech below for:
1. Does it sound natural, as if written by a person?
2. Is it free of typical AI phrases (e.g. "Podsumowując...", "Warto zauważyć...")?
3. Does it have the rhythm and cadence of a spoken speech?

Speech:
\"\"\"
{speech}
\"\"\"

{json_reply}"""

_STYLE_TEMPLATE = """You are a copy editor. Assess the text for:
1. Grammar and punctuation
2. Consistency of style (required tone: {tone})
3. Sentence length suitable for a speech

Text:
\"\"\"
{speech}
\"\"\"

{json_reply}"""

_LOGIC_TEMPLATE = """You are a content analyst. Check:
1. Are the arguments logically connected?
2. Is the opening-body-close structure kept?
3. Are there repetitions or contradictions?

Text:
\"\"\"
{speech}
\"\"\"

{json_reply}"""

_REFINEMENT_TEMPLATE = """Improve the speech below based on the reviewers' notes.

Notes to address:
{feedback}

Original speech:
\"\"\"
{speech}
\"\"\"

Required tone: {tone}
Audience: {audience}

Address every note while keeping the tone and the audience fit.
Return ONLY the corrected speech text, with no comments or explanations."""

_HUMANIZATION_TEMPLATE = """Edit the speech below so it sounds like it was written by a person.

Remove or replace these generic transition phrases wherever they appear:
{phrases}

Constraints:
- Keep the core message unchanged
- Keep the length within ±10% of the original
- Keep the tone unchanged

Speech:
\"\"\"
{speech}
\"\"\"

Return ONLY the text of the speech."""


def build_generation_prompt(params: SpeechParams) -> str:
    details_line = f"ADDITIONAL DETAILS: {params.details}\n" if params.details else ""
    return _GENERATION_TEMPLATE.format(
        topic=params.topic,
        tone=params.tone.value,
        duration=params.duration.value,
        audience=params.audience.value,
        details_line=details_line,
    )


def build_naturalness_prompt(speech: str) -> str:
    return _NATURALNESS_TEMPLATE.format(speech=speech, json_reply=_JSON_REPLY)


def build_style_prompt(speech: str, tone: Tone | str) -> str:
    return _STYLE_TEMPLATE.format(speech=speech, tone=Tone(tone).value, json_reply=_JSON_REPLY)


def build_logic_prompt(speech: str) -> str:
    return _LOGIC_TEMPLATE.format(speech=speech, json_reply=_JSON_REPLY)


def build_refinement_prompt(speech: str, feedback: list[str], params: SpeechParams) -> str:
    """Rewrite request covering every reviewer note, one bullet each."""
    return _REFINEMENT_TEMPLATE.format(
        feedback="\n".join(f"- {item}" for item in feedback),
        speech=speech,
        tone=params.tone.value,
        audience=params.audience.value,
    )


def build_humanization_prompt(speech: str) -> str:
    return _HUMANIZATION_TEMPLATE.format(
        phrases="\n".join(f'- "{phrase}..."' for phrase in AI_TRANSITION_PHRASES),
        speech=speech,
    )
