"""Capability matrix and router configuration loader.

Loads model capability profiles and task weights from models.toml and
router defaults from defaults.toml. Both are read once at start-up and
handed to the classifier, scoring engine and router.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from modeltriage.schemas.capabilities import (
    CapabilityMatrix,
    CapabilityScores,
    ModelProfile,
    TaskWeightProfile,
)
from modeltriage.schemas.classification import TaskType
from modeltriage.schemas.routing import RouterConfig, RoutingStrategy, TierModels

# Default config directory inside the modeltriage package
CONFIG_DIR = Path(__file__).parent / "config"


def load_capability_matrix(config_path: Path | None = None) -> CapabilityMatrix:
    """Load the capability matrix from a TOML file.

    Args:
        config_path: Path to models.toml. Defaults to modeltriage/config/models.toml.

    Returns:
        CapabilityMatrix with every model profile and task weight profile.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the TOML structure is invalid or has no general weights.
    """
    path = config_path or CONFIG_DIR / "models.toml"
    if not path.exists():
        raise FileNotFoundError(f"Capability matrix not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    models_section = raw.get("models")
    if not models_section or not isinstance(models_section, dict):
        raise ValueError(f"No [models] section found in {path}")

    models: dict[str, ModelProfile] = {}
    for model_id, entry in models_section.items():
        if not isinstance(entry, dict):
            continue
        caps_data = entry.pop("capabilities", {})
        models[model_id] = ModelProfile(
            id=model_id,
            capabilities=CapabilityScores(**caps_data),
            **entry,
        )

    weights_section = raw.get("task_weights") or {}
    task_weights: dict[TaskType, TaskWeightProfile] = {}
    for task_name, weights in weights_section.items():
        try:
            task = TaskType(task_name)
        except ValueError:
            raise ValueError(f"Unknown task type '{task_name}' in {path}") from None
        task_weights[task] = TaskWeightProfile(**weights)

    if TaskType.GENERAL not in task_weights:
        raise ValueError(f"No [task_weights.general] section found in {path}")

    return CapabilityMatrix(models=models, task_weights=task_weights)


def load_router_config(config_path: Path | None = None) -> RouterConfig:
    """Load router defaults from a TOML file.

    Args:
        config_path: Path to defaults.toml. Defaults to modeltriage/config/defaults.toml.

    Returns:
        RouterConfig with values from the TOML file.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the strategy name is unknown.
    """
    path = config_path or CONFIG_DIR / "defaults.toml"
    if not path.exists():
        raise FileNotFoundError(f"Router config not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    router_section = raw.get("router", {})

    # Parse strategy from string
    strategy = RoutingStrategy(router_section.get("strategy", "auto"))
    tiers = TierModels(**router_section.get("tiers", {}))

    return RouterConfig(
        strategy=strategy,
        candidates=list(router_section.get("candidates", [])),
        tiers=tiers,
        cache_size=router_section.get("cache_size", 0),
        cache_ttl=router_section.get("cache_ttl", 600.0),
    )
