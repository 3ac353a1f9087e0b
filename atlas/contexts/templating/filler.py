"""
LaTeX Template Filler

Turns a ResumeData instance into the set of LaTeX source files for one of the
supported templates. Pure: no filesystem writes, no compilation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Union

from atlas.contexts.templating.logger import _log_debug
from atlas.contexts.templating.registries import TemplateRegistry
from atlas.contexts.templating.resume_data_structure import ResumeData
from atlas.utils.text_processing import set_max_consecutive_blank_lines, truncate_display

# Length of the tagline the sidebar layout derives from the summary
TAGLINE_LENGTH = 50


class TemplateId(str, Enum):
    PROFESSIONAL = "professional"
    MODERN = "modern"


@dataclass(frozen=True)
class LatexFile:
    """One LaTeX source file handed to the compiler."""

    filename: str
    content: str


@dataclass(frozen=True)
class TemplateSpec:
    """
    Files a template produces.

    Attributes:
        files: Output filenames, in the order they are emitted
        main_file: The file the compiler is told to build
        static_files: Files copied verbatim instead of rendered
    """

    files: Tuple[str, ...]
    main_file: str
    static_files: Tuple[str, ...] = ()


TEMPLATE_SPECS: Dict[TemplateId, TemplateSpec] = {
    TemplateId.PROFESSIONAL: TemplateSpec(files=("main.tex",), main_file="main.tex"),
    TemplateId.MODERN: TemplateSpec(
        files=("altacv.cls", "page1sidebar.tex", "main.tex"),
        main_file="main.tex",
        static_files=("altacv.cls",),
    ),
}

_registry = TemplateRegistry()


def resolve_template_id(template_id: Union[TemplateId, str]) -> TemplateId:
    """
    Coerce a template identifier, rejecting anything outside the catalogue.

    Raises:
        ValueError: If the identifier is unknown
    """
    if isinstance(template_id, TemplateId):
        return template_id
    try:
        return TemplateId(str(template_id).strip().lower())
    except ValueError:
        known = ", ".join(t.value for t in TemplateId)
        raise ValueError(f"Unknown template '{template_id}' (expected one of: {known})") from None


def main_file_for(template_id: Union[TemplateId, str]) -> str:
    return TEMPLATE_SPECS[resolve_template_id(template_id)].main_file


def fill_template(
    template_id: Union[TemplateId, str],
    resume_data: ResumeData,
    registry: TemplateRegistry = None,
) -> List[LatexFile]:
    """
    Render ResumeData into the LaTeX files of a template.

    Every value substituted into the templates is escaped on output, and
    sections with no entries are left out entirely, so any valid ResumeData
    (including one with only a contact name) yields compilable sources.

    Args:
        template_id: Template identifier ('professional' or 'modern')
        resume_data: Resume to render
        registry: Template registry (default: the bundled templates)

    Returns:
        LatexFile list in the template's file order

    Raises:
        ValueError: If the template identifier is unknown
    """
    template_id = resolve_template_id(template_id)
    spec = TEMPLATE_SPECS[template_id]
    registry = registry or _registry

    context = {
        "resume": resume_data,
        "tagline": truncate_display(resume_data.summary.strip(), TAGLINE_LENGTH),
    }

    files = []
    for filename in spec.files:
        if filename in spec.static_files:
            content = registry.get_static_file(template_id.value, filename)
        else:
            rendered = registry.get_template(template_id.value, filename).render(**context)
            content = set_max_consecutive_blank_lines(rendered, max_consecutive=1)
        files.append(LatexFile(filename=filename, content=content))
        _log_debug(f"Rendered {template_id.value}/{filename} ({len(content)} chars)")

    return files
