"""YAML configuration loading."""

from pathlib import Path
from typing import Union

import yaml

from slung_load.config import PlannerConfig


def load_config(config_path: Union[str, Path]) -> dict:
    """Load a YAML configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed configuration dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the top level of the file is not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    return config


def load_planner_config(
    config_path: Union[str, Path],
    section: str = "planner",
) -> PlannerConfig:
    """Load a PlannerConfig from one section of a YAML file."""
    config = load_config(config_path)
    return PlannerConfig.from_dict(config.get(section, {}))
