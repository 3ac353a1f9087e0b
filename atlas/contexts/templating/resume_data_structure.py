"""
Resume Data Structure

Defines the canonical structured resume exchanged between the generation
collaborator and the LaTeX templates, plus the shape validator used to accept
or reject decoded model output.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from atlas.exceptions import InvalidResumeStructureError

REQUIRED_SECTIONS = ("contact", "summary", "experience", "skills", "education", "projects")


def _text(value: Any) -> str:
    """Coerce a leaf value to a string (None becomes empty)."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value).strip()
    return text or None


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidResumeStructureError(
            f"'{where}' must be an object, got {type(value).__name__}"
        )
    return value


def _sequence(value: Any, where: str, required: bool = True) -> List[Any]:
    if value is None and not required:
        return []
    if not isinstance(value, list):
        raise InvalidResumeStructureError(f"'{where}' must be a list, got {type(value).__name__}")
    return value


def _text_list(value: Any, where: str, required: bool = True) -> List[str]:
    return [_text(item) for item in _sequence(value, where, required) if _text(item).strip()]


@dataclass
class Contact:
    name: str
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Contact":
        data = _mapping(data, "contact")
        name = _text(data.get("name")).strip()
        if not name:
            raise InvalidResumeStructureError("'contact.name' is required")
        return cls(
            name=name,
            email=_text(data.get("email")),
            phone=_text(data.get("phone")),
            location=_text(data.get("location")),
            linkedin=_optional_text(data.get("linkedin")),
            github=_optional_text(data.get("github")),
            portfolio=_optional_text(data.get("portfolio")),
        )


@dataclass
class Experience:
    company: str
    position: str
    location: str = ""
    duration: str = ""
    achievements: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], where: str = "experience[]") -> "Experience":
        data = _mapping(data, where)
        return cls(
            company=_text(data.get("company")),
            position=_text(data.get("position")),
            location=_text(data.get("location")),
            duration=_text(data.get("duration")),
            achievements=_text_list(data.get("achievements"), f"{where}.achievements", False),
        )


@dataclass
class Skills:
    technical: List[str] = field(default_factory=list)
    tools: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Skills":
        data = _mapping(data, "skills")
        return cls(
            technical=_text_list(data.get("technical"), "skills.technical", False),
            tools=_text_list(data.get("tools"), "skills.tools", False),
            languages=_text_list(data.get("languages"), "skills.languages", False),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.technical or self.tools or self.languages)


@dataclass
class Education:
    degree: str
    field: str = ""
    institution: str = ""
    location: str = ""
    year: str = ""
    gpa: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], where: str = "education[]") -> "Education":
        data = _mapping(data, where)
        return cls(
            degree=_text(data.get("degree")),
            field=_text(data.get("field")),
            institution=_text(data.get("institution")),
            location=_text(data.get("location")),
            year=_text(data.get("year")),
            gpa=_optional_text(data.get("gpa")),
        )


@dataclass
class Project:
    name: str
    description: str = ""
    technologies: str = ""
    link: Optional[str] = None
    achievements: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], where: str = "projects[]") -> "Project":
        data = _mapping(data, where)
        technologies = data.get("technologies")
        # Models sometimes return the technologies as a list
        if isinstance(technologies, list):
            technologies = ", ".join(_text(t) for t in technologies)
        return cls(
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            technologies=_text(technologies),
            link=_optional_text(data.get("link")),
            achievements=_text_list(data.get("achievements"), f"{where}.achievements", False),
        )


@dataclass
class ResumeData:
    """
    Canonical structured resume.

    Free-text fields may hold anything; escaping for LaTeX happens when the
    data is rendered, never here.
    """

    contact: Contact
    summary: str = ""
    experience: List[Experience] = field(default_factory=list)
    skills: Skills = field(default_factory=Skills)
    education: List[Education] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResumeData":
        """
        Build and validate ResumeData from decoded JSON/YAML.

        Every top-level section must be present with the right container type.
        Leaf values are coerced to strings; optional leaves may be missing.

        Raises:
            InvalidResumeStructureError: If the data does not match the shape
        """
        data = _mapping(data, "resume")
        missing = [key for key in REQUIRED_SECTIONS if key not in data]
        if missing:
            raise InvalidResumeStructureError(f"Missing required sections: {', '.join(missing)}")

        summary = data["summary"]
        if summary is not None and not isinstance(summary, str):
            raise InvalidResumeStructureError("'summary' must be a string")

        return cls(
            contact=Contact.from_dict(data["contact"]),
            summary=_text(summary),
            experience=[
                Experience.from_dict(item, f"experience[{i}]")
                for i, item in enumerate(_sequence(data["experience"], "experience"))
            ],
            skills=Skills.from_dict(data["skills"]),
            education=[
                Education.from_dict(item, f"education[{i}]")
                for i, item in enumerate(_sequence(data["education"], "education"))
            ],
            projects=[
                Project.from_dict(item, f"projects[{i}]")
                for i, item in enumerate(_sequence(data["projects"], "projects"))
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
