"""
Content generation for targeting.

ContentGenerator is the capability the optimizer depends on (generate, score,
improve). LLMContentGenerator implements it on top of any LLMProvider; the
reply decoders turn free-form model output into typed values or a parse error.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from atlas.contexts.targeting.logger import _log_info, _log_warning
from atlas.contexts.targeting.prompts import (
    GENERATION_SYSTEM_PROMPT,
    SCORING_SYSTEM_PROMPT,
    build_generation_prompt,
    build_improvement_prompt,
    build_scoring_prompt,
)
from atlas.contexts.targeting.targeting_data_structures import ATSResult, ResearchProfile
from atlas.contexts.templating.resume_data_structure import ResumeData
from atlas.exceptions import GenerationParseError, InvalidResumeStructureError
from atlas.utils.llm import LLMProvider, parse_json_object_reply

T = TypeVar("T")

GENERATION_MAX_TOKENS = 3000
SCORING_MAX_TOKENS = 1000


@dataclass
class Decoded(Generic[T]):
    """Tagged decode outcome: exactly one of value / error is set."""

    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _decode(reply: str, build: Callable[[dict], T]) -> Decoded[T]:
    parsed = parse_json_object_reply(reply)
    if not parsed.ok:
        return Decoded(error=parsed.error)
    try:
        return Decoded(value=build(parsed.payload))
    except (InvalidResumeStructureError, ValueError) as e:
        return Decoded(error=str(e))


def decode_resume_data(reply: str) -> Decoded[ResumeData]:
    """
    Decode a model reply into ResumeData.

    The embedded JSON object must carry every ResumeData section with the
    right container types; a syntactically valid but mis-shaped object is a
    decode error, never a partially filled resume.
    """
    return _decode(reply, ResumeData.from_dict)


def decode_ats_result(reply: str) -> Decoded[ATSResult]:
    return _decode(reply, ATSResult.from_dict)


class ContentGenerator(ABC):
    """
    Generation capability used by the optimizer.

    Implementations raise GenerationParseError when a reply cannot be turned
    into the requested structure, and LLMServiceError when the backing
    service is unreachable.
    """

    @abstractmethod
    def generate_resume_data(
        self, extracted_text: str, profile: ResearchProfile, role: str
    ) -> ResumeData:
        """Build optimized ResumeData from the uploaded resume's text."""

    @abstractmethod
    def score_document_text(self, rendered_text: str, profile: ResearchProfile, role: str) -> ATSResult:
        """Score the text extracted from a compiled resume."""

    @abstractmethod
    def improve_resume_data(
        self,
        current: ResumeData,
        ats_result: ATSResult,
        profile: ResearchProfile,
        role: str,
    ) -> ResumeData:
        """Return replacement ResumeData that addresses the ATS feedback."""


class LLMContentGenerator(ContentGenerator):
    """ContentGenerator backed by an LLMProvider."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    def _ask(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        response = self.provider.generate(system_prompt, user_prompt, max_tokens=max_tokens)
        return response.content

    def _resume_from(self, reply: str, stage: str) -> ResumeData:
        decoded = decode_resume_data(reply)
        if not decoded.ok:
            _log_warning(f"Unusable reply while {stage}: {decoded.error}")
            raise GenerationParseError(stage, decoded.error, raw_reply=reply)
        return decoded.value

    def generate_resume_data(
        self, extracted_text: str, profile: ResearchProfile, role: str
    ) -> ResumeData:
        _log_info(f"Generating resume data for {role} at {profile.name}")
        reply = self._ask(
            GENERATION_SYSTEM_PROMPT,
            build_generation_prompt(extracted_text, profile, role),
            GENERATION_MAX_TOKENS,
        )
        return self._resume_from(reply, "generating the resume")

    def score_document_text(self, rendered_text: str, profile: ResearchProfile, role: str) -> ATSResult:
        reply = self._ask(
            SCORING_SYSTEM_PROMPT,
            build_scoring_prompt(rendered_text, profile, role),
            SCORING_MAX_TOKENS,
        )
        decoded = decode_ats_result(reply)
        if not decoded.ok:
            _log_warning(f"Unusable scoring reply: {decoded.error}")
            raise GenerationParseError("scoring the resume", decoded.error, raw_reply=reply)
        _log_info(f"ATS score: {decoded.value.score}/100")
        return decoded.value

    def improve_resume_data(
        self,
        current: ResumeData,
        ats_result: ATSResult,
        profile: ResearchProfile,
        role: str,
    ) -> ResumeData:
        _log_info(f"Improving resume (current score {ats_result.score}/100)")
        reply = self._ask(
            GENERATION_SYSTEM_PROMPT,
            build_improvement_prompt(current, ats_result, profile, role),
            GENERATION_MAX_TOKENS,
        )
        return self._resume_from(reply, "improving the resume")
