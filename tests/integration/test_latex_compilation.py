"""
Integration tests for rendering + compiling real resumes.

Require a local pdflatex with the packages the templates use, or a Docker
daemon with the TeX Live image already pulled (LATEX_RUNNER=docker).
"""

import os
import shutil
import subprocess

import pytest

from atlas.contexts.intake.extractor import clean_text, extract_text
from atlas.contexts.rendering import compiler
from atlas.contexts.rendering.compiler import compile_latex
from atlas.contexts.templating.filler import TemplateId, fill_template, main_file_for


def _has_tex_packages(*packages) -> bool:
    if shutil.which("kpsewhich") is None:
        return False
    for package in packages:
        found = subprocess.run(["kpsewhich", package], capture_output=True, text=True)
        if not found.stdout.strip():
            return False
    return True


def _docker_image_present() -> bool:
    if shutil.which(compiler.DOCKER_BINARY) is None:
        return False
    found = subprocess.run(
        [compiler.DOCKER_BINARY, "image", "inspect", compiler.LATEX_DOCKER_IMAGE],
        capture_output=True,
    )
    return found.returncode == 0


def _pick_runner(*packages):
    if os.getenv("LATEX_RUNNER") == "docker":
        return "docker" if _docker_image_present() else None
    if shutil.which(compiler.LATEX_COMPILER) and _has_tex_packages(*packages):
        return "local"
    return None


PROFESSIONAL_PACKAGES = ("fontawesome5.sty", "titlesec.sty", "enumitem.sty", "glyphtounicode.tex")
MODERN_PACKAGES = (
    "fontawesome.sty",
    "lato.sty",
    "tcolorbox.sty",
    "scrlfile.sty",
    "dashrule.sty",
    "ragged2e.sty",
)


@pytest.mark.integration
@pytest.mark.latex
@pytest.mark.parametrize(
    "template_id, packages",
    [(TemplateId.PROFESSIONAL, PROFESSIONAL_PACKAGES), (TemplateId.MODERN, MODERN_PACKAGES)],
)
def test_compile_and_reextract(template_id, packages, sample_resume):
    runner = _pick_runner(*packages)
    if runner is None:
        pytest.skip("No LaTeX toolchain with the required packages available")

    files = fill_template(template_id, sample_resume)
    result = compile_latex(files, main_file_for(template_id), runner=runner)

    assert result.success, f"Compilation failed: {result.error}"
    assert result.page_count >= 1

    text = clean_text(extract_text(result.pdf).text)
    assert "Jane" in text
    assert "Acme" in text


@pytest.mark.integration
@pytest.mark.latex
def test_broken_source_reports_errors():
    runner = _pick_runner()
    if runner is None:
        pytest.skip("No LaTeX toolchain available")

    from atlas.contexts.templating.filler import LatexFile

    broken = LatexFile(
        "main.tex", "\\documentclass{article}\n\\begin{document}\n\\badmacro\n\\end{document}\n"
    )
    result = compile_latex([broken], runner=runner)

    assert not result.success
    assert any("Undefined control sequence" in e for e in result.errors)
