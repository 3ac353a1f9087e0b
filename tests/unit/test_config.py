"""Unit tests for loading the optimization policy."""

import pytest

from atlas.contexts.optimization.config import OptimizationConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ATS_THRESHOLD", "MAX_ATTEMPTS", "MIN_CONTENT_LENGTH", "DEFAULT_TEMPLATE"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_defaults():
    config = load_config(config_path=None, use_env=False)

    assert config == OptimizationConfig(
        ats_threshold=80, max_attempts=3, min_content_length=100, default_template="professional"
    )


@pytest.mark.unit
def test_yaml_layer(tmp_path):
    config_file = tmp_path / "optimization.yaml"
    config_file.write_text("ats_threshold: 90\ndefault_template: Modern\n")

    config = load_config(config_path=config_file, use_env=False)

    assert config.ats_threshold == 90
    assert config.max_attempts == 3
    assert config.default_template == "modern"


@pytest.mark.unit
def test_missing_yaml_is_skipped(tmp_path):
    config = load_config(config_path=tmp_path / "absent.yaml", use_env=False)
    assert config.ats_threshold == 80


@pytest.mark.unit
def test_precedence(tmp_path, monkeypatch):
    config_file = tmp_path / "optimization.yaml"
    config_file.write_text("ats_threshold: 90\nmax_attempts: 4\n")
    monkeypatch.setenv("ATS_THRESHOLD", "70")
    monkeypatch.setenv("MAX_ATTEMPTS", "6")

    config = load_config(
        config_path=config_file, overrides={"max_attempts": 2, "ats_threshold": None}
    )

    # env beats YAML, explicit overrides beat env, None overrides are ignored
    assert config.ats_threshold == 70
    assert config.max_attempts == 2


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides",
    [
        {"ats_threshold": 101},
        {"ats_threshold": -1},
        {"max_attempts": 0},
        {"min_content_length": 0},
        {"default_template": "classic"},
        {"max_attempts": "many"},
    ],
)
def test_invalid_values(overrides):
    with pytest.raises(ValueError):
        load_config(config_path=None, overrides=overrides, use_env=False)


@pytest.mark.unit
def test_shipped_config_file_is_valid():
    config = load_config(config_path="configs/optimization.yaml", use_env=False)
    assert config.max_attempts >= 1
