"""
Targeting Data Structures

Research profile of the target company and the ATS quality assessment of a
rendered resume.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Tuple


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _strings(value: Any) -> Tuple[str, ...]:
    """Coerce a loosely-typed list field to a tuple of non-empty strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(_text(item).strip() for item in value if _text(item).strip())


@dataclass(frozen=True)
class ResearchProfile:
    """
    What is known about the target company for one run.

    Computed once per run and reused unmodified by every generation,
    scoring and improvement call.
    """

    name: str
    website: str = ""
    description: str = ""
    industry: str = ""
    tech_stack: Tuple[str, ...] = ()
    culture: str = ""
    recent_news: Tuple[str, ...] = ()
    job_requirements: Tuple[str, ...] = ()
    raw_data: str = ""

    @classmethod
    def empty(cls, name: str) -> "ResearchProfile":
        return cls(name=name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], fallback_name: str = "") -> "ResearchProfile":
        """Build from a camelCase or snake_case mapping, tolerating missing keys."""

        def pick(*keys):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        return cls(
            name=_text(pick("name")).strip() or fallback_name,
            website=_text(pick("website")),
            description=_text(pick("description")),
            industry=_text(pick("industry")),
            tech_stack=_strings(pick("techStack", "tech_stack")),
            culture=_text(pick("culture")),
            recent_news=_strings(pick("recentNews", "recent_news")),
            job_requirements=_strings(pick("jobRequirements", "job_requirements")),
            raw_data=_text(pick("rawData", "raw_data")),
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.description
            or self.industry
            or self.tech_stack
            or self.culture
            or self.job_requirements
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "website": self.website,
            "description": self.description,
            "industry": self.industry,
            "techStack": list(self.tech_stack),
            "culture": self.culture,
            "recentNews": list(self.recent_news),
            "jobRequirements": list(self.job_requirements),
            "rawData": self.raw_data,
        }


@dataclass(frozen=True)
class ATSResult:
    """
    Quality assessment of one rendered resume.

    Attributes:
        score: Integer in 0..100
        feedback: What the scorer observed
        improvements: What the scorer suggests changing
    """

    score: int
    feedback: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ATSResult":
        """
        Build from decoded JSON, clamping the score into 0..100.

        Raises:
            ValueError: If the score is missing or not a number
        """
        raw_score = data.get("score")
        if isinstance(raw_score, bool) or raw_score is None:
            raise ValueError(f"'score' must be a number, got {type(raw_score).__name__}")
        try:
            score = round(float(raw_score))
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"'score' must be a number, got {type(raw_score).__name__}") from None

        return cls(
            score=min(100, max(0, score)),
            feedback=list(_strings(data.get("feedback"))),
            improvements=list(_strings(data.get("improvements"))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
