"""
Shared utilities for ATLAS.

Common functionality used across contexts:
- Logging (loguru setup and pipeline events)
- LLM providers and reply parsing
- Text processing
- Timestamps
"""

from atlas.utils.timestamp import now, now_exact, today

__all__ = ["now", "now_exact", "today"]
