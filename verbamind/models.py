"""Pure dataclasses for the speech generation pipeline. No I/O, no deps."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Tone(str, Enum):
    OFFICIAL = "oficjalny"
    MOTIVATIONAL = "motywacyjny"
    CASUAL = "casual"
    ACADEMIC = "akademicki"
    EMOTIONAL = "emocjonalny"
    HUMOROUS = "humorystyczny"


class Duration(str, Enum):
    TWO_MINUTES = "2 minuty"
    FIVE_MINUTES = "5 minut"
    TEN_MINUTES = "10 minut"
    FIFTEEN_MINUTES = "15 minut"
    TWENTY_PLUS_MINUTES = "20+ minut"


class Audience(str, Enum):
    BUSINESS = "biznesowi"
    STUDENTS = "studenci"
    GENERAL_PUBLIC = "ogólna publiczność"
    EXPERTS = "eksperci"
    MIXED = "mieszana"


ASPECTS = ("naturalness", "style", "logic")
PROVIDER_NAMES = ("claude", "openai", "gemini")


@dataclass(frozen=True)
class SpeechParams:
    topic: str
    tone: Tone
    duration: Duration
    audience: Audience
    details: str | None = None

    def __post_init__(self) -> None:
        if not self.topic or not self.topic.strip():
            raise ValueError("topic must not be empty")
        # Frozen: coerce plain strings through object.__setattr__
        object.__setattr__(self, "tone", Tone(self.tone))
        object.__setattr__(self, "duration", Duration(self.duration))
        object.__setattr__(self, "audience", Audience(self.audience))
        if self.details is not None and not self.details.strip():
            object.__setattr__(self, "details", None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "tone": self.tone.value,
            "duration": self.duration.value,
            "audience": self.audience.value,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeechParams":
        return cls(
            topic=data["topic"],
            tone=data["tone"],
            duration=data["duration"],
            audience=data["audience"],
            details=data.get("details"),
        )


@dataclass(frozen=True)
class ApiKeys:
    """Per-provider credentials. Any subset may be absent."""

    claude: str | None = None
    openai: str | None = None
    gemini: str | None = None

    def get(self, provider: str) -> str | None:
        if provider not in PROVIDER_NAMES:
            return None
        value = getattr(self, provider)
        if value is None:
            return None
        return value.strip() or None

    def available(self) -> list[str]:
        """Providers with a credential, in fixed order."""
        return [p for p in PROVIDER_NAMES if self.get(p)]

    def merged(self, other: "ApiKeys") -> "ApiKeys":
        """Return a new set where keys present in `other` replace ours."""
        return ApiKeys(**{p: other.get(p) or self.get(p) for p in PROVIDER_NAMES})


@dataclass(frozen=True)
class VerificationResult:
    aspect: str            # "naturalness", "style" or "logic"
    score: int             # 0-100
    feedback: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"aspect": self.aspect, "score": self.score, "feedback": list(self.feedback)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VerificationResult":
        return cls(
            aspect=str(data["aspect"]),
            score=int(data["score"]),
            feedback=tuple(str(f) for f in data.get("feedback", [])),
        )


@dataclass
class GenerationResult:
    text: str
    verification_results: list[VerificationResult] = field(default_factory=list)
    overall_score: int = 90
    was_refined: bool = False
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "verification_results": [r.to_dict() for r in self.verification_results],
            "overall_score": self.overall_score,
            "was_refined": self.was_refined,
            "generated_at": self.generated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationResult":
        return cls(
            text=data["text"],
            verification_results=[
                VerificationResult.from_dict(r) for r in data.get("verification_results", [])
            ],
            overall_score=int(data["overall_score"]),
            was_refined=bool(data["was_refined"]),
            generated_at=datetime.fromisoformat(data["generated_at"]),
        )


@dataclass
class SpeechHistoryItem:
    id: str
    params: SpeechParams
    result: GenerationResult
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "params": self.params.to_dict(),
            "result": self.result.to_dict(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeechHistoryItem":
        return cls(
            id=data["id"],
            params=SpeechParams.from_dict(data["params"]),
            result=GenerationResult.from_dict(data["result"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
