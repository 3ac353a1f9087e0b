"""
Run-policy configuration for resume optimization.

Layers, lowest to highest precedence:
    1. OptimizationConfig defaults
    2. YAML file (configs/optimization.yaml, optional)
    3. Environment overrides (ATS_THRESHOLD, MAX_ATTEMPTS, MIN_CONTENT_LENGTH, DEFAULT_TEMPLATE)
    4. Explicit overrides passed to load_config() (e.g., CLI flags)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from atlas.contexts.templating.filler import resolve_template_id

load_dotenv()

DEFAULT_CONFIG_PATH = Path(os.getenv("ATLAS_CONFIG", "configs/optimization.yaml"))

ENV_OVERRIDES = {
    "ATS_THRESHOLD": "ats_threshold",
    "MAX_ATTEMPTS": "max_attempts",
    "MIN_CONTENT_LENGTH": "min_content_length",
    "DEFAULT_TEMPLATE": "default_template",
}


@dataclass
class OptimizationConfig:
    """
    Policy for one optimization run.

    Attributes:
        ats_threshold: Score (0-100) at or above which the loop stops
        max_attempts: Total scoring rounds allowed, initial one included
        min_content_length: Minimum cleaned text length of an upload
        default_template: Template used when a request names none
    """

    ats_threshold: int = 80
    max_attempts: int = 3
    min_content_length: int = 100
    default_template: str = "professional"

    def validate(self) -> "OptimizationConfig":
        """
        Raises:
            ValueError: If any value is out of range
        """
        if not 0 <= self.ats_threshold <= 100:
            raise ValueError(f"ats_threshold must be within 0..100, got {self.ats_threshold}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.min_content_length < 1:
            raise ValueError(
                f"min_content_length must be at least 1, got {self.min_content_length}"
            )
        self.default_template = resolve_template_id(self.default_template).value
        return self


def _env_overrides() -> Dict[str, Any]:
    overrides = {}
    for env_var, key in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None and value.strip():
            overrides[key] = value.strip()
    return overrides


def load_config(
    config_path: Optional[Path] = DEFAULT_CONFIG_PATH,
    overrides: Optional[Dict[str, Any]] = None,
    use_env: bool = True,
) -> OptimizationConfig:
    """
    Load and validate the optimization policy.

    Args:
        config_path: YAML file to merge (skipped if None or missing)
        overrides: Highest-precedence values; None entries are ignored
        use_env: Apply environment overrides

    Returns:
        Validated OptimizationConfig

    Raises:
        ValueError: If a value has the wrong type or is out of range
    """
    layers = [OmegaConf.structured(OptimizationConfig)]

    if config_path is not None and Path(config_path).exists():
        layers.append(OmegaConf.load(config_path))
    if use_env:
        layers.append(OmegaConf.create(_env_overrides()))
    if overrides:
        layers.append(OmegaConf.create({k: v for k, v in overrides.items() if v is not None}))

    # omegaconf's ValidationError subclasses ValueError
    merged = OmegaConf.merge(*layers)
    config: OptimizationConfig = OmegaConf.to_object(merged)
    return config.validate()
