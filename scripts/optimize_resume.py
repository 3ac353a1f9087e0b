#!/usr/bin/env python3
"""
Resume Optimization CLI

Optimizes an uploaded PDF resume for a target company and role, and exposes
the extraction and rendering stages on their own.

Commands:
    optimize - Run the full optimization loop on a PDF resume
    extract  - Show what text extraction sees in a PDF
    render   - Render structured resume data (JSON/YAML) to LaTeX, optionally compiling it
    events   - Show recent pipeline events

Examples:\n

    optimize_resume.py optimize resume.pdf --company Acme --role "Data Engineer"

    optimize_resume.py optimize resume.pdf -c Acme -r "Data Engineer" --template modern --threshold 85

    optimize_resume.py extract resume.pdf

    optimize_resume.py render resume.yaml --template modern --out outs/render --compile

    optimize_resume.py events --run 20251114_123456_ab12cd
"""

import json
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from atlas.contexts.intake import clean_text, extract_text
from atlas.contexts.optimization import (
    LocalResultStore,
    OptimizationRequest,
    ResumeOptimizer,
    load_config,
)
from atlas.contexts.rendering import compile_latex
from atlas.contexts.targeting import CompanyResearcher, LLMContentGenerator
from atlas.contexts.templating import ResumeData, TemplateId, fill_template, main_file_for
from atlas.exceptions import AtlasError
from atlas.utils.event_logging import get_recent_events
from atlas.utils.llm import get_provider
from atlas.utils.logger import setup_logger
from atlas.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Optimize PDF resumes for ATS screening against a target company and role",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _read_pdf(pdf_path: Path) -> bytes:
    if not pdf_path.exists():
        typer.secho(f"Error: file not found: {pdf_path}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return pdf_path.read_bytes()


@app.command("optimize")
def optimize_command(
    pdf_path: Annotated[Path, typer.Argument(help="PDF resume to optimize")],
    company: Annotated[str, typer.Option("--company", "-c", help="Target company")],
    role: Annotated[str, typer.Option("--role", "-r", help="Target role")],
    template: Annotated[
        Optional[TemplateId],
        typer.Option("--template", "-t", help="LaTeX template (default: from config)"),
    ] = None,
    threshold: Annotated[
        Optional[int],
        typer.Option("--threshold", help="ATS score that ends the loop", min=0, max=100),
    ] = None,
    max_attempts: Annotated[
        Optional[int],
        typer.Option("--max-attempts", help="Total scoring rounds allowed", min=1),
    ] = None,
    user_id: Annotated[
        str, typer.Option("--user", "-u", help="Owner of the stored result")
    ] = "local",
    hints: Annotated[
        Optional[str],
        typer.Option("--hints", help="Extra details about the company or job posting"),
    ] = None,
    provider: Annotated[
        Optional[str],
        typer.Option("--provider", help="LLM provider: openrouter, openai or anthropic"),
    ] = None,
    model: Annotated[Optional[str], typer.Option("--model", help="LLM model name")] = None,
    output_json: Annotated[
        bool, typer.Option("--json", help="Print the run result as JSON")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug messages on the console")
    ] = False,
):
    """
    Run the full optimization loop on a PDF resume.

    Examples:\n

        $ optimize_resume.py optimize resume.pdf -c Acme -r "Backend Engineer"

        $ optimize_resume.py optimize resume.pdf -c Acme -r "SRE" --max-attempts 5 --json
    """
    document = _read_pdf(pdf_path)

    try:
        config = load_config(
            overrides={"ats_threshold": threshold, "max_attempts": max_attempts}
        )
        llm = get_provider(provider_name=provider, model=model)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    log_file = setup_logger(
        context_name="optimize",
        log_dir=LOGS_PATH / f"optimize_{now()}",
        extra_provenance={
            "Resume": pdf_path,
            "Company": company,
            "Role": role,
            "LLM": llm.name,
            "Threshold": config.ats_threshold,
            "Max attempts": config.max_attempts,
        },
        verbose=verbose,
    )

    optimizer = ResumeOptimizer(
        generator=LLMContentGenerator(llm),
        researcher=CompanyResearcher(provider=llm),
        store=LocalResultStore(),
        config=config,
    )
    result = optimizer.optimize(
        OptimizationRequest(
            user_id=user_id,
            document=document,
            company_name=company,
            role=role,
            template=template.value if template else None,
            original_filename=pdf_path.name,
            hints=hints,
        )
    )

    if output_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        raise typer.Exit(code=0 if result.success else 1)

    typer.echo("")
    if result.success:
        typer.secho("✓ Optimization succeeded", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  Score: {result.score}/100 after {result.attempts} attempt(s)")
        history = ", ".join(f"#{h['attempt']}: {h['score']}" for h in result.score_history)
        typer.echo(f"  History: {history}")
        typer.echo(f"  Template: {result.template_used}")
        typer.echo(f"  PDF: {result.download_reference}")
        if result.improvements:
            typer.echo("\nRemaining suggestions:")
            for suggestion in result.improvements[:5]:
                typer.echo(f"  - {suggestion}")
    else:
        typer.secho("✗ Optimization failed", fg=typer.colors.RED, bold=True)
        typer.secho(f"  {result.error}", fg=typer.colors.RED)

    typer.echo(f"  Log: {log_file}")
    typer.echo("")
    raise typer.Exit(code=0 if result.success else 1)


@app.command("extract")
def extract_command(
    pdf_path: Annotated[Path, typer.Argument(help="PDF to extract text from")],
    show_text: Annotated[
        bool, typer.Option("--text", help="Print the cleaned text")
    ] = False,
):
    """
    Show what text extraction sees in a PDF (page count, metadata, text length).

    Examples:\n

        $ optimize_resume.py extract resume.pdf

        $ optimize_resume.py extract resume.pdf --text
    """
    try:
        extraction = extract_text(_read_pdf(pdf_path))
    except AtlasError as e:
        typer.secho(f"Error: {e.user_message}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    text = clean_text(extraction.text)
    typer.secho(f"\n{pdf_path.name}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"  Pages: {extraction.page_count}")
    for key, value in extraction.metadata.items():
        typer.echo(f"  {key}: {value}")
    typer.echo(f"  Cleaned text length: {len(text)} characters")
    if show_text:
        typer.echo(f"\n{text}")
    typer.echo("")


def _load_resume_data(path: Path) -> ResumeData:
    if path.suffix.lower() in (".yaml", ".yml"):
        data = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    else:
        data = json.loads(path.read_text(encoding="utf-8"))
    return ResumeData.from_dict(data)


@app.command("render")
def render_command(
    resume_path: Annotated[Path, typer.Argument(help="Structured resume (.json, .yaml)")],
    template: Annotated[
        TemplateId, typer.Option("--template", "-t", help="LaTeX template")
    ] = TemplateId.PROFESSIONAL,
    out_dir: Annotated[
        Path, typer.Option("--out", "-o", help="Directory for the LaTeX sources")
    ] = Path("outs/render"),
    compile_pdf: Annotated[
        bool, typer.Option("--compile", help="Also compile the sources to PDF")
    ] = False,
):
    """
    Render structured resume data to LaTeX sources (and optionally a PDF).

    Examples:\n

        $ optimize_resume.py render resume.json

        $ optimize_resume.py render resume.yaml --template modern --compile
    """
    try:
        resume_data = _load_resume_data(resume_path)
    except (OSError, ValueError) as e:
        typer.secho(f"Error: could not load {resume_path}: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    files = fill_template(template, resume_data)
    out_dir.mkdir(parents=True, exist_ok=True)
    for latex_file in files:
        (out_dir / latex_file.filename).write_text(latex_file.content, encoding="utf-8")
        typer.echo(f"  Wrote {out_dir / latex_file.filename}")

    if not compile_pdf:
        raise typer.Exit(code=0)

    main_file = main_file_for(template)
    result = compile_latex(files, main_file)
    if not result.success:
        typer.secho(f"✗ Compilation failed: {result.error}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1)

    pdf_path = out_dir / f"{Path(main_file).stem}.pdf"
    pdf_path.write_bytes(result.pdf)
    typer.secho(
        f"✓ Compiled {pdf_path} ({result.page_count} page(s))", fg=typer.colors.GREEN, bold=True
    )


@app.command("events")
def events_command(
    n: Annotated[int, typer.Option("-n", help="Number of recent events", min=1)] = 20,
    run_id: Annotated[
        Optional[str], typer.Option("--run", help="Only events of this run")
    ] = None,
    event_type: Annotated[
        Optional[str], typer.Option("--type", help="Only events of this type")
    ] = None,
    compact: Annotated[
        bool, typer.Option("--compact", help="One line per event")
    ] = False,
):
    """
    Show recent pipeline events from the JSON Lines event log.

    Examples:\n

        $ optimize_resume.py events -n 50

        $ optimize_resume.py events --run 20251114_123456_ab12cd --type state_change --compact
    """
    events = get_recent_events(n=n, run_id=run_id, event_type=event_type)
    if not events:
        typer.secho("No events found", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)

    for event in events:
        if compact:
            typer.echo(json.dumps(event))
        else:
            typer.echo(json.dumps(event, indent=2))
            typer.echo("")


if __name__ == "__main__":
    app()
