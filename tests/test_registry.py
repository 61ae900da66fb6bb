"""Tests for modeltriage.registry — TOML capability matrix and router config loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from modeltriage.registry import CONFIG_DIR, load_capability_matrix, load_router_config
from modeltriage.schemas.capabilities import Capability, CapabilityMatrix
from modeltriage.schemas.classification import TaskType
from modeltriage.schemas.routing import RouterConfig, RoutingStrategy

_EXPECTED_MODELS = [
    "gpt-5-mini",
    "claude-haiku-4-5-20251001",
    "gemini-3-flash-preview",
    "claude-sonnet-4-5-20250929",
    "gemini-3-pro-preview",
    "gpt-5.2",
    "claude-opus-4-6",
]

_MINIMAL_MATRIX = """
[models."m1"]
display_name = "Model One"
provider = "Acme"

[models."m1".capabilities]
reasoning = 0.5
speed = 0.9

[task_weights.general]
reasoning = 1.0
"""


class TestLoadCapabilityMatrix:
    def test_loads_real_config(self):
        matrix = load_capability_matrix(CONFIG_DIR / "models.toml")
        assert isinstance(matrix, CapabilityMatrix)
        assert len(matrix.models) == len(_EXPECTED_MODELS)

    def test_all_expected_models_present(self):
        matrix = load_capability_matrix()
        for model_id in _EXPECTED_MODELS:
            assert model_id in matrix.models, f"Missing model: {model_id}"

    def test_every_task_type_weighted(self):
        matrix = load_capability_matrix()
        for task in TaskType:
            assert task in matrix.task_weights, f"Missing weights: {task}"

    def test_profile_values(self):
        profile = load_capability_matrix().models["gpt-5.2"]
        assert profile.display_name == "GPT-5.2"
        assert profile.provider == "OpenAI"
        assert profile.capabilities.reasoning == 0.96
        assert profile.capabilities.get(Capability.COST_EFFICIENCY) == 0.20

    def test_minimal_file(self, tmp_path):
        path = tmp_path / "models.toml"
        path.write_text(_MINIMAL_MATRIX)
        matrix = load_capability_matrix(path)
        assert matrix.models["m1"].capabilities.speed == 0.9
        # Unlisted capabilities default to zero
        assert matrix.models["m1"].capabilities.debugging == 0.0
        assert matrix.weights_for(TaskType.DEBUG).reasoning == 1.0

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_capability_matrix(Path("/nonexistent/models.toml"))

    def test_empty_models_section_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[models]\n\n[task_weights.general]\nreasoning = 1.0\n")
        with pytest.raises(ValueError, match="No \\[models\\] section"):
            load_capability_matrix(path)

    def test_missing_general_weights_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text(_MINIMAL_MATRIX.replace("[task_weights.general]", "[task_weights.qa]"))
        with pytest.raises(ValueError, match="general"):
            load_capability_matrix(path)

    def test_unknown_task_type_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text(_MINIMAL_MATRIX + "\n[task_weights.poetry]\nreasoning = 1.0\n")
        with pytest.raises(ValueError, match="poetry"):
            load_capability_matrix(path)

    def test_out_of_range_capability_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text(_MINIMAL_MATRIX.replace("speed = 0.9", "speed = 1.5"))
        with pytest.raises(ValidationError):
            load_capability_matrix(path)


class TestLoadRouterConfig:
    def test_loads_real_config(self):
        config = load_router_config(CONFIG_DIR / "defaults.toml")
        assert isinstance(config, RouterConfig)
        assert config.strategy == RoutingStrategy.KEYWORD_PRIORITY
        assert config.candidates == []
        assert config.cache_size == 0
        assert config.cache_ttl == 600

    def test_default_tiers_are_profiled(self):
        config = load_router_config()
        matrix = load_capability_matrix()
        for model_id in config.tiers.model_dump().values():
            assert model_id in matrix.models

    def test_custom_file(self, tmp_path):
        path = tmp_path / "defaults.toml"
        path.write_text(
            '[router]\nstrategy = "keyword_priority"\n'
            'candidates = ["a", "b"]\ncache_size = 50\ncache_ttl = 30\n'
            '[router.tiers]\nfast = "mock-fast-1"\n'
        )
        config = load_router_config(path)
        assert config.strategy == RoutingStrategy.KEYWORD_PRIORITY
        assert config.candidates == ["a", "b"]
        assert config.cache_size == 50
        assert config.cache_ttl == 30
        assert config.tiers.fast == "mock-fast-1"
        assert config.tiers.quality == "gpt-5.2"

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "defaults.toml"
        path.write_text("")
        assert load_router_config(path) == RouterConfig()

    def test_unknown_strategy_raises(self, tmp_path):
        path = tmp_path / "defaults.toml"
        path.write_text('[router]\nstrategy = "random"\n')
        with pytest.raises(ValueError):
            load_router_config(path)

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_router_config(Path("/nonexistent/defaults.toml"))
