"""Unit tests for reply decoding and the LLM-backed content generator."""

import json

import pytest

from atlas.contexts.targeting.generation import (
    LLMContentGenerator,
    decode_ats_result,
    decode_resume_data,
)
from atlas.contexts.targeting.prompts import build_generation_prompt, build_scoring_prompt
from atlas.contexts.targeting.targeting_data_structures import ATSResult, ResearchProfile
from atlas.exceptions import GenerationParseError
from atlas.utils.llm import LLMResponse

PROFILE = ResearchProfile(
    name="Acme",
    industry="Logistics",
    tech_stack=("Python", "Kafka"),
    job_requirements=("5+ years of data engineering",),
)


class FakeProvider:
    name = "fake/model"

    def __init__(self, replies):
        self.replies = list(replies)
        self.prompts = []

    def generate(self, system_prompt, user_prompt, max_tokens=2048):
        self.prompts.append((system_prompt, user_prompt))
        return LLMResponse(
            content=self.replies.pop(0), model="model", input_tokens=10, output_tokens=20
        )


# --- decoders ---


@pytest.mark.unit
def test_decode_resume_data(sample_resume_dict):
    reply = "Here is the optimized resume:\n```json\n" + json.dumps(sample_resume_dict) + "\n```"
    decoded = decode_resume_data(reply)

    assert decoded.ok
    assert decoded.value.contact.name == "Jane Doe"


@pytest.mark.unit
def test_decode_resume_data_rejects_wrong_shape(sample_resume_dict):
    sample_resume_dict["experience"] = "Ten years at Acme"
    decoded = decode_resume_data(json.dumps(sample_resume_dict))

    assert not decoded.ok
    assert decoded.value is None
    assert "experience" in decoded.error


@pytest.mark.unit
def test_decode_resume_data_rejects_prose():
    decoded = decode_resume_data("I'm sorry, I can't help with that.")
    assert not decoded.ok


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload, score",
    [
        ({"score": 72}, 72),
        ({"score": 87.6}, 88),
        ({"score": "91"}, 91),
        ({"score": 140}, 100),
        ({"score": -5}, 0),
    ],
)
def test_decode_ats_result_score(payload, score):
    decoded = decode_ats_result(json.dumps(payload))
    assert decoded.value.score == score


@pytest.mark.unit
@pytest.mark.parametrize("payload", [{}, {"score": None}, {"score": True}, {"score": "high"}])
def test_decode_ats_result_rejects_bad_score(payload):
    decoded = decode_ats_result(json.dumps(payload))

    assert not decoded.ok
    assert "score" in decoded.error


@pytest.mark.unit
def test_decode_ats_result_lists():
    decoded = decode_ats_result(
        json.dumps({"score": 75, "feedback": ["Good keywords", ""], "improvements": "Add metrics"})
    )

    assert decoded.value == ATSResult(
        score=75, feedback=["Good keywords"], improvements=["Add metrics"]
    )


# --- generator ---


@pytest.mark.unit
def test_generate_resume_data(sample_resume_dict):
    provider = FakeProvider([json.dumps(sample_resume_dict)])
    generator = LLMContentGenerator(provider)

    resume = generator.generate_resume_data("Jane Doe resume text", PROFILE, "Data Engineer")

    assert resume.contact.name == "Jane Doe"
    _, user_prompt = provider.prompts[0]
    assert "Jane Doe resume text" in user_prompt
    assert "Kafka" in user_prompt
    assert "Data Engineer" in user_prompt


@pytest.mark.unit
def test_generate_resume_data_parse_error():
    generator = LLMContentGenerator(FakeProvider(["not json"]))

    with pytest.raises(GenerationParseError) as exc_info:
        generator.generate_resume_data("text", PROFILE, "Data Engineer")

    assert exc_info.value.stage == "generating the resume"
    assert exc_info.value.details == "not json"


@pytest.mark.unit
def test_parse_error_message_leaves_reply_in_details():
    reply = 'Here you go: {"contact": {"name": "Jane Doe"}, "summary": "R&D lead",}'
    generator = LLMContentGenerator(FakeProvider([reply]))

    with pytest.raises(GenerationParseError) as exc_info:
        generator.generate_resume_data("text", PROFILE, "Data Engineer")

    assert "Could not parse embedded JSON object" in exc_info.value.user_message
    assert "Jane Doe" not in exc_info.value.user_message
    assert "R&D lead" not in exc_info.value.user_message
    assert exc_info.value.details == reply


@pytest.mark.unit
def test_score_document_text():
    generator = LLMContentGenerator(
        FakeProvider(['{"score": 64, "feedback": ["ok"], "improvements": ["more metrics"]}'])
    )

    result = generator.score_document_text("rendered text", PROFILE, "Data Engineer")

    assert result.score == 64
    assert result.improvements == ["more metrics"]


@pytest.mark.unit
def test_score_document_text_parse_error():
    generator = LLMContentGenerator(FakeProvider(['{"feedback": []}']))

    with pytest.raises(GenerationParseError, match="scoring the resume"):
        generator.score_document_text("rendered text", PROFILE, "Data Engineer")


@pytest.mark.unit
def test_improve_resume_data(sample_resume, sample_resume_dict):
    sample_resume_dict["summary"] = "Improved summary mentioning Kafka."
    provider = FakeProvider([json.dumps(sample_resume_dict)])
    generator = LLMContentGenerator(provider)
    ats = ATSResult(score=55, feedback=["thin"], improvements=["Mention Kafka"])

    improved = generator.improve_resume_data(sample_resume, ats, PROFILE, "Data Engineer")

    assert improved.summary == "Improved summary mentioning Kafka."
    _, user_prompt = provider.prompts[0]
    assert "Mention Kafka" in user_prompt
    assert "55" in user_prompt


@pytest.mark.unit
def test_prompts_handle_empty_profile():
    profile = ResearchProfile.empty("Acme")

    assert "Acme" in build_generation_prompt("text", profile, "SRE")
    assert "Acme" in build_scoring_prompt("text", profile, "SRE")
