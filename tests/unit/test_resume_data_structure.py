"""Unit tests for ResumeData shape validation."""

import copy

import pytest

from atlas.contexts.templating.resume_data_structure import ResumeData
from atlas.exceptions import InvalidResumeStructureError


@pytest.mark.unit
def test_from_dict_full(sample_resume_dict):
    resume = ResumeData.from_dict(sample_resume_dict)

    assert resume.contact.name == "Jane Doe"
    assert resume.contact.portfolio is None
    assert [job.company for job in resume.experience] == ["Acme Analytics", "Initech"]
    assert resume.skills.tools == ["Airflow", "dbt", "Docker"]
    assert resume.education[0].gpa == "1.3"
    # List-valued technologies are joined
    assert resume.projects[0].technologies == "Rust, Flink"


@pytest.mark.unit
def test_from_dict_minimal():
    resume = ResumeData.from_dict(
        {
            "contact": {"name": "Jane Doe"},
            "summary": "",
            "experience": [],
            "skills": {},
            "education": [],
            "projects": [],
        }
    )

    assert resume.contact.email == ""
    assert resume.skills.is_empty
    assert resume.experience == []


@pytest.mark.unit
@pytest.mark.parametrize("section", ["contact", "summary", "experience", "skills", "education", "projects"])
def test_missing_section_rejected(sample_resume_dict, section):
    del sample_resume_dict[section]

    with pytest.raises(InvalidResumeStructureError, match=section):
        ResumeData.from_dict(sample_resume_dict)


@pytest.mark.unit
@pytest.mark.parametrize(
    "path, bad_value",
    [
        (("experience",), {"company": "Acme"}),
        (("skills",), ["Python"]),
        (("contact",), "Jane Doe"),
        (("summary",), ["not", "a", "string"]),
        (("experience", 0, "achievements"), "one long string"),
        (("education", 0), "MSc"),
    ],
)
def test_wrong_container_type_rejected(sample_resume_dict, path, bad_value):
    data = copy.deepcopy(sample_resume_dict)
    target = data
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = bad_value

    with pytest.raises(InvalidResumeStructureError):
        ResumeData.from_dict(data)


@pytest.mark.unit
def test_contact_name_required(sample_resume_dict):
    sample_resume_dict["contact"]["name"] = "   "

    with pytest.raises(InvalidResumeStructureError, match="contact.name"):
        ResumeData.from_dict(sample_resume_dict)


@pytest.mark.unit
def test_invalid_structure_is_a_value_error():
    assert issubclass(InvalidResumeStructureError, ValueError)


@pytest.mark.unit
def test_to_dict_round_trips(sample_resume):
    assert ResumeData.from_dict(sample_resume.to_dict()) == sample_resume
