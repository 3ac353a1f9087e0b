"""
Optimization Context

Responsibilities:
- Orchestrates a resume optimization run (extract, research, generate,
  render, compile, score, iterate, persist)
- Owns the run policy (quality threshold, attempt budget)
- Persists finished runs

Owns: Run state machine, retry policy, result records
Never: Talks to the LaTeX toolchain or the LLM directly
"""

from atlas.contexts.optimization.config import OptimizationConfig, load_config
from atlas.contexts.optimization.orchestrator import (
    OptimizationRequest,
    OptimizationRun,
    ResumeOptimizer,
    RunResult,
    RunState,
)
from atlas.contexts.optimization.persistence import (
    LocalResultStore,
    OptimizationRecord,
    ResultStore,
    SavedRecord,
)

__all__ = [
    # Configuration
    "OptimizationConfig",
    "load_config",
    # Orchestration
    "OptimizationRequest",
    "OptimizationRun",
    "ResumeOptimizer",
    "RunResult",
    "RunState",
    # Persistence
    "LocalResultStore",
    "OptimizationRecord",
    "ResultStore",
    "SavedRecord",
]
