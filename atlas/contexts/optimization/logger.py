"""
Optimization context logger.

All optimization modules log through these wrappers, never through loguru directly.
Output routing is decided by the entry point (atlas.utils.logger.setup_logger).
"""

from atlas.utils.logger import prefixed_log_functions

CONTEXT_PREFIX = "[optimize]"

_log_info, _log_success, _log_error, _log_warning, _log_debug = prefixed_log_functions(
    CONTEXT_PREFIX
)
