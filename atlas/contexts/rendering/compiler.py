"""
LaTeX Compilation Module

Compiles a set of in-memory LaTeX sources to PDF bytes, either inside a
TeX Live container (default) or with a local pdflatex.

Every call stages its sources in a fresh scratch directory that is removed on
every exit path, including timeouts and interrupts.
"""

import os
import re
import subprocess
import tempfile
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from dotenv import load_dotenv

from atlas.contexts.rendering.logger import (
    _log_debug,
    _log_warning,
    log_compilation_result,
    log_compilation_start,
)
from atlas.contexts.templating.filler import LatexFile
from atlas.utils.pdf_processing import page_count
from atlas.utils.text_processing import tail

load_dotenv()

LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
LATEX_RUNNER = os.getenv("LATEX_RUNNER", "docker")
LATEX_DOCKER_IMAGE = os.getenv("LATEX_DOCKER_IMAGE", "texlive/texlive:latest")
LATEX_TIMEOUT_S = float(os.getenv("LATEX_TIMEOUT_S", "180"))
LATEX_NUM_PASSES = int(os.getenv("LATEX_NUM_PASSES", "1"))
DOCKER_BINARY = os.getenv("DOCKER_BINARY", "docker")

RUNNERS = ("docker", "local")
LATEX_EXTENSIONS = (".tex", ".cls", ".sty")

# A real one-page resume is well above this; smaller output means a silent failure
MIN_PDF_BYTES = 1000

# Only the tail of the toolchain's combined stdout/stderr is kept
MAX_CAPTURE_BYTES = 256 * 1024

ERROR_LOG_TAIL = 1000
RAW_LOG_TAIL = 1500


@dataclass
class CompilationResult:
    """
    Result of LaTeX compilation.

    Attributes:
        success: Whether compilation produced a plausible PDF
        pdf: PDF bytes (None if failed)
        error: Diagnostic for a failed compilation (None on success)
        logs: Tail of the toolchain's stdout/stderr
        errors: List of parsed LaTeX errors
        warnings: List of parsed LaTeX warnings
        page_count: Number of pages in generated PDF (None if not available)
    """

    success: bool
    pdf: Optional[bytes] = None
    error: Optional[str] = None
    logs: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    page_count: Optional[int] = None

    @classmethod
    def failure(cls, error: str, logs: str = "", **kwargs) -> "CompilationResult":
        return cls(success=False, error=error, logs=logs, **kwargs)


@dataclass
class ValidationResult:
    """Outcome of the pre-compilation checks on a set of sources."""

    is_valid: bool
    error: Optional[str] = None


def validate_latex_files(files: Sequence[LatexFile], main_file: str) -> ValidationResult:
    """
    Check a set of LaTeX sources before anything touches the filesystem.

    Rules:
    - At least one file
    - main_file is one of the files
    - Every filename is a bare name with a LaTeX extension (.tex, .cls, .sty)
    - No file is empty or whitespace-only

    Returns:
        ValidationResult (never raises)
    """
    if not files:
        return ValidationResult(False, "No files provided for compilation")

    filenames = [f.filename for f in files]
    if main_file not in filenames:
        return ValidationResult(False, f"Main file '{main_file}' not found in provided files")

    unsafe = [name for name in filenames if Path(name).name != name or name in ("", ".", "..")]
    if unsafe:
        return ValidationResult(False, f"Invalid file names: {', '.join(map(repr, unsafe))}")

    if len(set(filenames)) != len(filenames):
        return ValidationResult(False, "Duplicate file names in compilation input")

    wrong_extension = [name for name in filenames if not name.endswith(LATEX_EXTENSIONS)]
    if wrong_extension:
        return ValidationResult(
            False,
            f"All files must have one of the extensions {', '.join(LATEX_EXTENSIONS)} "
            f"(got: {', '.join(wrong_extension)})",
        )

    empty = [f.filename for f in files if not f.content or not f.content.strip()]
    if empty:
        return ValidationResult(False, f"Empty content in files: {', '.join(empty)}")

    return ValidationResult(True)


# "! Undefined control sequence." and its -file-line-error twin "./main.tex:12: ..."
_ERROR_LINE = re.compile(r"^(?:! |\S+\.(?:tex|cls|sty):\d+: )(.+)$")
_WARNING_LINE = re.compile(
    r"(?:LaTeX|Package \w+) Warning: (.+)|(?:Over|Under)full \\hbox \((.+)\)"
)


def _parse_latex_log(log_content: str) -> Tuple[List[str], List[str]]:
    """Collect (errors, warnings) from a LaTeX log; repeated errors are reported once."""
    errors: List[str] = []
    warnings: List[str] = []
    for line in log_content.splitlines():
        error = _ERROR_LINE.match(line)
        if error:
            message = error.group(1).strip()
            if message not in errors:
                errors.append(message)
            continue
        warning = _WARNING_LINE.search(line)
        if warning:
            warnings.append((warning.group(1) or warning.group(2)).strip())
    return errors, warnings


def _log_excerpt(log_content: Optional[str]) -> str:
    """Error-signaling lines plus a short tail, or a longer raw tail if there are none."""
    if log_content is None:
        return "Log file not found"
    error_lines = [line for line in log_content.splitlines() if _ERROR_LINE.match(line)]
    if error_lines:
        return "\n".join(error_lines) + "\n\n" + tail(log_content, ERROR_LOG_TAIL)
    return tail(log_content, RAW_LOG_TAIL)


def _read_log(scratch_dir: Path, main_file: str) -> Optional[str]:
    log_path = scratch_dir / f"{Path(main_file).stem}.log"
    if not log_path.exists():
        return None
    # pdflatex writes log files in latin-1 (font metadata is not UTF-8)
    return log_path.read_text(encoding="latin-1")


def _read_capture(capture) -> str:
    capture.flush()
    size = capture.seek(0, os.SEEK_END)
    capture.seek(max(0, size - MAX_CAPTURE_BYTES))
    return capture.read().decode("utf-8", errors="replace")


def _latex_args(main_file: str, output_dir: str) -> List[str]:
    return [
        LATEX_COMPILER,
        "-interaction=nonstopmode",
        "-file-line-error",
        f"-output-directory={output_dir}",
        main_file,
    ]


def _build_command(runner: str, scratch_dir: Path, main_file: str, container_name: str) -> List[str]:
    if runner == "local":
        return _latex_args(main_file, ".")

    cmd = [DOCKER_BINARY, "run", "--rm", "--name", container_name, "--network", "none"]
    # Keep output owned by the host user so the scratch directory stays removable
    if hasattr(os, "getuid"):
        cmd += ["--user", f"{os.getuid()}:{os.getgid()}"]
    cmd += ["-w", "/data", "-v", f"{scratch_dir.resolve()}:/data", LATEX_DOCKER_IMAGE]
    return cmd + _latex_args(main_file, "/data")


def _force_remove_container(container_name: str) -> None:
    """Stop a container left behind by a killed `docker run` client."""
    try:
        subprocess.run(
            [DOCKER_BINARY, "rm", "-f", container_name],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=30,
        )
    except (OSError, subprocess.SubprocessError) as e:
        _log_warning(f"Could not remove container {container_name}: {e}")


def _run_toolchain(
    cmd: List[str], cwd: Path, timeout_s: float, container_name: Optional[str]
) -> Tuple[Optional[int], str]:
    """
    Run one toolchain pass with a wall-clock timeout and bounded output capture.

    Returns:
        (returncode, output); returncode is None on timeout

    Raises:
        OSError: If the executable cannot be started
    """
    with tempfile.TemporaryFile() as capture:
        process = subprocess.Popen(cmd, cwd=cwd, stdout=capture, stderr=subprocess.STDOUT)
        try:
            returncode = process.wait(timeout=timeout_s)
        except subprocess.TimeoutExpired:
            returncode = None
        except BaseException:
            # Interrupted or cancelled: tear the job down before unwinding
            process.kill()
            process.wait()
            if container_name:
                _force_remove_container(container_name)
            raise

        if returncode is None:
            process.kill()
            process.wait()
            if container_name:
                _force_remove_container(container_name)

        return returncode, _read_capture(capture)


def compile_latex(
    files: Sequence[LatexFile],
    main_file: str = "main.tex",
    num_passes: int = LATEX_NUM_PASSES,
    runner: str = LATEX_RUNNER,
    timeout_s: float = LATEX_TIMEOUT_S,
) -> CompilationResult:
    """
    Compile LaTeX sources to PDF.

    Invalid input is reported as a failed result without touching the
    filesystem. Success requires a zero exit status from every pass AND a PDF
    of at least MIN_PDF_BYTES bytes.

    Args:
        files: LaTeX sources to stage side by side
        main_file: The file pdflatex is told to build
        num_passes: Number of pdflatex passes
        runner: 'docker' (isolated TeX Live container) or 'local' (pdflatex on PATH)
        timeout_s: Wall-clock budget for all passes together

    Returns:
        CompilationResult with PDF bytes or a diagnostic (never raises for
        toolchain failures)
    """
    validation = validate_latex_files(files, main_file)
    if not validation.is_valid:
        return CompilationResult.failure(validation.error, errors=[validation.error])

    if runner not in RUNNERS:
        error = f"Unknown LaTeX runner '{runner}' (expected one of: {', '.join(RUNNERS)})"
        return CompilationResult.failure(error, errors=[error])

    log_compilation_start(main_file, len(files), runner, num_passes)
    start_time = time.time()

    with tempfile.TemporaryDirectory(prefix="atlas-latex-") as scratch:
        scratch_dir = Path(scratch)
        for latex_file in files:
            (scratch_dir / latex_file.filename).write_text(latex_file.content, encoding="utf-8")
            _log_debug(f"  Staged {latex_file.filename} ({len(latex_file.content)} chars)")

        result = _compile_in(scratch_dir, main_file, num_passes, runner, timeout_s)

    log_compilation_result(main_file, result, time.time() - start_time)
    return result


def _compile_in(
    scratch_dir: Path, main_file: str, num_passes: int, runner: str, timeout_s: float
) -> CompilationResult:
    deadline = time.monotonic() + timeout_s
    outputs = []
    returncode: Optional[int] = 0

    # Multiple passes resolve cross-references; stop at the first failing pass
    for _ in range(max(1, num_passes)):
        container_name = f"atlas-latex-{uuid.uuid4().hex[:12]}" if runner == "docker" else None
        cmd = _build_command(runner, scratch_dir, main_file, container_name)
        remaining = max(0.0, deadline - time.monotonic())
        try:
            returncode, output = _run_toolchain(cmd, scratch_dir, remaining, container_name)
        except OSError as e:
            error = f"LaTeX toolchain could not be started ({cmd[0]}): {e}"
            return CompilationResult.failure(error, errors=[error])
        outputs.append(output)
        if returncode != 0:
            break

    logs = tail("\n".join(outputs), MAX_CAPTURE_BYTES)
    log_content = _read_log(scratch_dir, main_file)
    errors, warnings = _parse_latex_log(log_content or "")

    if returncode is None:
        error = f"LaTeX compilation timed out after {timeout_s:g}s"
        return CompilationResult.failure(error, logs, errors=[error] + errors, warnings=warnings)

    if returncode != 0:
        error = f"Compilation failed (exit code {returncode}): {_log_excerpt(log_content)}"
        return CompilationResult.failure(error, logs, errors=errors, warnings=warnings)

    pdf_path = scratch_dir / f"{Path(main_file).stem}.pdf"
    if not pdf_path.exists():
        error = f"PDF file was not generated. Log excerpt: {_log_excerpt(log_content)}"
        return CompilationResult.failure(error, logs, errors=errors, warnings=warnings)

    pdf = pdf_path.read_bytes()
    if len(pdf) < MIN_PDF_BYTES:
        error = f"Generated PDF is too small ({len(pdf)} bytes, compilation likely failed)"
        return CompilationResult.failure(error, logs, errors=errors, warnings=warnings)

    return CompilationResult(
        success=True,
        pdf=pdf,
        logs=logs,
        errors=errors,
        warnings=warnings,
        page_count=page_count(pdf),
    )
