"""
Resume Optimization Orchestrator

Drives one optimization run through its states:

    extracting -> researching -> generating -> rendering -> compiling -> scoring
        -> (iterating -> rendering ...)* -> finalizing -> done | failed

Policies:
- Research runs once per run; its profile is reused unmodified by every call.
- The first generation, compilation and scoring are all-or-nothing: a failure
  fails the run.
- The improvement loop is bounded by attempts, not by score progress. A failed
  improvement, recompilation or rescoring ends the loop early and the run is
  finalized with the last good document and score.
- The last computed score is reported, not the best one.
- A record that cannot be persisted fails the run.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from atlas.contexts.intake.extractor import (
    ExtractionResult,
    clean_text,
    ensure_sufficient_content,
    extract_text,
)
from atlas.contexts.optimization.config import OptimizationConfig
from atlas.contexts.optimization.logger import (
    _log_error,
    _log_info,
    _log_success,
    _log_warning,
)
from atlas.contexts.optimization.persistence import OptimizationRecord, ResultStore
from atlas.contexts.rendering.compiler import CompilationResult, compile_latex
from atlas.contexts.targeting.generation import ContentGenerator
from atlas.contexts.targeting.research import CompanyResearcher
from atlas.contexts.targeting.targeting_data_structures import ATSResult, ResearchProfile
from atlas.contexts.templating.filler import (
    LatexFile,
    TemplateId,
    fill_template,
    main_file_for,
    resolve_template_id,
)
from atlas.contexts.templating.resume_data_structure import ResumeData
from atlas.exceptions import AtlasError, CompilationError, ExtractionError
from atlas.utils.event_logging import log_pipeline_event
from atlas.utils.timestamp import now

CompileFn = Callable[[Sequence[LatexFile], str], CompilationResult]
ExtractFn = Callable[[bytes], ExtractionResult]

EVENT_SOURCE = "optimization"


class RunState(str, Enum):
    EXTRACTING = "extracting"
    RESEARCHING = "researching"
    GENERATING = "generating"
    RENDERING = "rendering"
    COMPILING = "compiling"
    SCORING = "scoring"
    ITERATING = "iterating"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class OptimizationRequest:
    """
    One caller request.

    Attributes:
        user_id: Owner of the stored result
        document: Uploaded PDF bytes
        company_name: Target company
        role: Target role
        template: Template identifier (default: config.default_template)
        original_filename: Name of the uploaded file, kept with the record
        hints: Optional details about the company supplied by the user
    """

    user_id: str
    document: bytes
    company_name: str
    role: str
    template: Optional[str] = None
    original_filename: str = "resume.pdf"
    hints: Optional[str] = None


@dataclass
class OptimizationRun:
    """Working state of one run. Never shared between runs."""

    run_id: str
    request: OptimizationRequest
    template_id: TemplateId
    state: RunState = RunState.EXTRACTING
    original_text: str = ""
    research_profile: Optional[ResearchProfile] = None
    current_resume_data: Optional[ResumeData] = None
    current_latex_files: List[LatexFile] = field(default_factory=list)
    current_pdf: Optional[bytes] = None
    current_ats: Optional[ATSResult] = None
    attempt: int = 1
    score_history: List[Dict[str, int]] = field(default_factory=list)

    @property
    def current_score(self) -> Optional[int]:
        return self.current_ats.score if self.current_ats else None


@dataclass
class RunResult:
    """What the optimizer hands back to its caller."""

    success: bool
    run_id: str
    error: Optional[str] = None
    logs: Optional[str] = None
    resume_id: Optional[str] = None
    download_reference: Optional[str] = None
    score: Optional[int] = None
    feedback: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    attempts: int = 0
    score_history: List[Dict[str, int]] = field(default_factory=list)
    template_used: Optional[str] = None
    resume_data: Optional[ResumeData] = None
    pdf: Optional[bytes] = None
    research_profile: Optional[ResearchProfile] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            result = {"success": False, "error": self.error}
            if self.logs:
                result["logs"] = self.logs
            return result

        profile = self.research_profile
        return {
            "success": True,
            "resumeId": self.resume_id,
            "score": self.score,
            "feedback": self.feedback,
            "improvements": self.improvements,
            "attempts": self.attempts,
            "scoreHistory": self.score_history,
            "downloadReference": self.download_reference,
            "templateUsed": self.template_used,
            "companyResearch": {
                "name": profile.name if profile else "",
                "techStack": list(profile.tech_stack) if profile else [],
            },
        }


class ResumeOptimizer:
    """
    Runs the extract / research / generate / render / compile / score loop.

    Collaborators are injected so the generation backend, research source,
    compiler and store can be swapped without touching the loop.
    """

    def __init__(
        self,
        generator: ContentGenerator,
        researcher: CompanyResearcher,
        store: ResultStore,
        config: OptimizationConfig = None,
        compile_fn: CompileFn = compile_latex,
        extract_fn: ExtractFn = extract_text,
    ):
        self.generator = generator
        self.researcher = researcher
        self.store = store
        self.config = config or OptimizationConfig()
        self.compile_fn = compile_fn
        self.extract_fn = extract_fn

    # --- state bookkeeping ---

    def _enter(self, run: OptimizationRun, state: RunState, **extra_fields) -> None:
        run.state = state
        log_pipeline_event(
            event_type="state_change",
            run_id=run.run_id,
            source=EVENT_SOURCE,
            state=state.value,
            attempt=run.attempt,
            **extra_fields,
        )

    def _fail(self, run: OptimizationRun, error: AtlasError) -> RunResult:
        failed_in = run.state.value
        _log_error(f"Run {run.run_id} failed while {failed_in}: {error.user_message}")
        self._enter(
            run,
            RunState.FAILED,
            failed_in=failed_in,
            error_type=type(error).__name__,
            error=error.user_message,
        )
        logs = error.details if isinstance(error, CompilationError) else None
        return RunResult(success=False, run_id=run.run_id, error=error.user_message, logs=logs)

    # --- stages ---

    def _extract(self, run: OptimizationRun) -> None:
        self._enter(run, RunState.EXTRACTING, document_bytes=len(run.request.document))
        extraction = self.extract_fn(run.request.document)
        text = clean_text(extraction.text)
        run.original_text = ensure_sufficient_content(text, self.config.min_content_length)
        _log_info(f"Extracted {len(text)} characters from {extraction.page_count} page(s)")

    def _research(self, run: OptimizationRun) -> None:
        request = run.request
        self._enter(run, RunState.RESEARCHING, company=request.company_name)
        try:
            profile = self.researcher.research(request.company_name, request.role, request.hints)
        except Exception as e:
            # Research only enriches the prompts; it never decides the run
            _log_warning(f"Research failed, continuing with an empty profile: {e}")
            profile = None
        run.research_profile = profile or ResearchProfile.empty(request.company_name)

    def _generate(self, run: OptimizationRun) -> None:
        self._enter(run, RunState.GENERATING)
        run.current_resume_data = self.generator.generate_resume_data(
            run.original_text, run.research_profile, run.request.role
        )

    def _render_and_compile(
        self, run: OptimizationRun, resume_data: ResumeData
    ) -> Tuple[List[LatexFile], bytes]:
        self._enter(run, RunState.RENDERING, template=run.template_id.value)
        files = fill_template(run.template_id, resume_data)

        self._enter(run, RunState.COMPILING)
        result = self.compile_fn(files, main_file_for(run.template_id))
        if not result.success:
            reason = (
                result.errors[0]
                if result.errors
                else "the LaTeX toolchain did not produce a usable PDF"
            )
            details = "\n\n".join(part for part in (result.error, result.logs) if part)
            raise CompilationError(reason, logs=details or None)
        return files, result.pdf

    def _score(self, run: OptimizationRun, pdf: bytes) -> ATSResult:
        self._enter(run, RunState.SCORING)
        # Score what was actually rendered, not the data that went in
        try:
            extraction = self.extract_fn(pdf)
        except ExtractionError as e:
            raise CompilationError(
                "the compiled PDF could not be read back",
                logs=e.details or e.reason,
            ) from e
        rendered_text = clean_text(extraction.text)
        return self.generator.score_document_text(
            rendered_text, run.research_profile, run.request.role
        )

    def _accept(
        self,
        run: OptimizationRun,
        resume_data: ResumeData,
        files: List[LatexFile],
        pdf: bytes,
        ats: ATSResult,
    ) -> None:
        run.current_resume_data = resume_data
        run.current_latex_files = files
        run.current_pdf = pdf
        run.current_ats = ats
        run.score_history.append({"attempt": run.attempt, "score": ats.score})
        log_pipeline_event(
            event_type="scored",
            run_id=run.run_id,
            source=EVENT_SOURCE,
            attempt=run.attempt,
            score=ats.score,
        )
        _log_info(f"Attempt {run.attempt}: ATS score {ats.score}/100")

    def _iterate(self, run: OptimizationRun) -> None:
        threshold = self.config.ats_threshold
        while run.current_score < threshold and run.attempt < self.config.max_attempts:
            run.attempt += 1
            self._enter(run, RunState.ITERATING, previous_score=run.current_score)
            try:
                improved = self.generator.improve_resume_data(
                    run.current_resume_data,
                    run.current_ats,
                    run.research_profile,
                    run.request.role,
                )
                files, pdf = self._render_and_compile(run, improved)
                ats = self._score(run, pdf)
            except AtlasError as e:
                _log_warning(
                    f"Attempt {run.attempt} failed while {run.state.value} ({e.user_message}); "
                    f"keeping the attempt {run.score_history[-1]['attempt']} result"
                )
                log_pipeline_event(
                    event_type="iteration_failed",
                    run_id=run.run_id,
                    source=EVENT_SOURCE,
                    attempt=run.attempt,
                    state=run.state.value,
                    error=e.user_message,
                )
                return
            self._accept(run, improved, files, pdf, ats)

    def _finalize(self, run: OptimizationRun) -> RunResult:
        self._enter(run, RunState.FINALIZING, score=run.current_score)
        request = run.request
        record = OptimizationRecord(
            user_id=request.user_id,
            resume_data=run.current_resume_data,
            pdf=run.current_pdf,
            score=run.current_ats.score,
            feedback=run.current_ats.feedback,
            improvements=run.current_ats.improvements,
            attempts=run.attempt,
            score_history=list(run.score_history),
            template=run.template_id.value,
            latex_files=run.current_latex_files,
            research_profile=run.research_profile,
            company=request.company_name,
            role=request.role,
            original_filename=request.original_filename,
        )
        saved = self.store.save(record)

        self._enter(run, RunState.DONE, score=run.current_score, resume_id=saved.record_id)
        _log_success(
            f"Run {run.run_id} done: score {run.current_score}/100 after {run.attempt} attempt(s)"
        )
        return RunResult(
            success=True,
            run_id=run.run_id,
            resume_id=saved.record_id,
            download_reference=saved.download_reference,
            score=run.current_ats.score,
            feedback=run.current_ats.feedback,
            improvements=run.current_ats.improvements,
            attempts=run.attempt,
            score_history=list(run.score_history),
            template_used=run.template_id.value,
            resume_data=run.current_resume_data,
            pdf=run.current_pdf,
            research_profile=run.research_profile,
        )

    # --- entry point ---

    def optimize(self, request: OptimizationRequest) -> RunResult:
        """
        Run one optimization request to completion.

        Expected failures (unreadable upload, unusable model output, compile or
        save failures) come back as RunResult(success=False) with a plain
        message. Programming errors propagate.

        Raises:
            ValueError: If the request names an unknown template
        """
        template_id = resolve_template_id(request.template or self.config.default_template)
        run = OptimizationRun(
            run_id=f"{now()}_{uuid.uuid4().hex[:6]}",
            request=request,
            template_id=template_id,
        )
        _log_info(
            f"Run {run.run_id}: {request.role} at {request.company_name} "
            f"(template={template_id.value}, threshold={self.config.ats_threshold}, "
            f"max_attempts={self.config.max_attempts})"
        )

        try:
            self._extract(run)
            self._research(run)
            self._generate(run)
            files, pdf = self._render_and_compile(run, run.current_resume_data)
            ats = self._score(run, pdf)
            self._accept(run, run.current_resume_data, files, pdf, ats)
            self._iterate(run)
            return self._finalize(run)
        except AtlasError as e:
            return self._fail(run, e)
