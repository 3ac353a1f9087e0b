"""
Templating Registries

Loads the LaTeX templates bundled under template/{template_id}/. Rendered files
live there as {filename}.jinja; files such as class files sit beside them and
are shipped unchanged.
"""

from pathlib import Path
from typing import Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound

from atlas.contexts.templating.escaping import escape_latex

TEMPLATES_PATH = Path(__file__).parent / "template"

# Jinja's default {{ }} and {% %} collide with LaTeX group braces
LATEX_DELIMITERS = dict(
    variable_start_string="<<<",
    variable_end_string=">>>",
    block_start_string="<%%",
    block_end_string="%%>",
    comment_start_string="<#",
    comment_end_string="#>",
)


def latex_environment(search_path: Path) -> Environment:
    """
    Jinja2 environment for LaTeX sources.

    Every <<< expression >>> goes through escape_latex() on output, and a
    missing variable raises instead of rendering as an empty string.
    """
    return Environment(
        loader=FileSystemLoader(str(search_path)),
        undefined=StrictUndefined,
        finalize=escape_latex,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
        **LATEX_DELIMITERS,
    )


class TemplateRegistry:
    """Compiled templates and static files of the template families, by template id."""

    def __init__(self, templates_base_path: Optional[Path] = None):
        self.templates_base_path = Path(templates_base_path or TEMPLATES_PATH)
        self.env = latex_environment(self.templates_base_path)
        self._compiled: Dict[str, Template] = {}

    @staticmethod
    def _key(template_id: str, filename: str) -> str:
        return f"{template_id}/{filename}"

    def get_template(self, template_id: str, filename: str) -> Template:
        """
        Compiled template producing `filename` for a template family.

        Raises:
            TemplateNotFound: No {filename}.jinja in the family's directory
            TemplateSyntaxError: The template does not parse
        """
        key = self._key(template_id, filename)
        template = self._compiled.get(key)
        if template is None:
            source = f"{key}.jinja"
            try:
                template = self.env.get_template(source)
            except TemplateNotFound as e:
                raise TemplateNotFound(
                    f"No template for '{key}' (looked for {self.templates_base_path / source})"
                ) from e
            self._compiled[key] = template
        return template

    def get_static_file(self, template_id: str, filename: str) -> str:
        """Contents of a file shipped verbatim; FileNotFoundError if absent."""
        return (self.templates_base_path / template_id / filename).read_text(encoding="utf-8")

    def is_cached(self, template_id: str, filename: str) -> bool:
        return self._key(template_id, filename) in self._compiled

    def clear_cache(self) -> None:
        self._compiled.clear()
