"""
Rendering context logger.

Prefixed wrappers plus compilation-specific helpers. Toolchain output is only
ever written at DEBUG level, so it reaches the session log file but not the
console or any user-facing message.
"""

from loguru import logger

from atlas.utils.logger import prefixed_log_functions

CONTEXT_PREFIX = "[render]"

_log_info, _log_success, _log_error, _log_warning, _log_debug = prefixed_log_functions(
    CONTEXT_PREFIX
)


def _log_first(items, label: str, limit: int, log_fn) -> None:
    for i, item in enumerate(items[:limit], 1):
        log_fn(f"  {label} {i}: {item}")
    if len(items) > limit:
        log_fn(f"  ... and {len(items) - limit} more")


def log_compilation_start(main_file: str, file_count: int, runner: str, num_passes: int) -> None:
    _log_info(f"Compiling {main_file} ({file_count} file(s), runner={runner}, passes={num_passes})")


def log_compilation_result(main_file: str, result, elapsed_time: float, verbose: bool = False) -> None:
    """
    Summarize a CompilationResult.

    Errors go to ERROR, warnings to DEBUG. The captured toolchain output is
    dumped verbatim at DEBUG for failures (and for successes when verbose).
    """
    if result.success:
        _log_success(
            f"{main_file}: {len(result.pdf)} bytes, {result.page_count} page(s), "
            f"{len(result.warnings)} warning(s) in {elapsed_time:.2f}s"
        )
    else:
        _log_error(f"{main_file} failed after {elapsed_time:.2f}s: {result.error.splitlines()[0]}")
        _log_first(result.errors, "Error", 10 if verbose else 5, _log_error)

    if result.warnings:
        _log_first(result.warnings, "Warning", 10 if verbose else 3, _log_debug)

    if (verbose or not result.success) and result.logs:
        logger.opt(raw=True).debug(
            f"\n{'=' * 80}\nLATEX TOOLCHAIN OUTPUT ({main_file}):\n{'=' * 80}\n{result.logs}\n"
        )
