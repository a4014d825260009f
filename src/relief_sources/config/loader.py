"""YAML configuration loading utilities."""

from pathlib import Path

import yaml

from relief_sources.config.models import ReliefConfig


def load_config(path: Path | str) -> ReliefConfig:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated ReliefConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    path = Path(path)
    with path.open() as f:
        raw = yaml.safe_load(f)

    return ReliefConfig.model_validate(raw or {})


def get_default_config_path() -> Path:
    """Get path to the bundled default config file."""
    return Path(__file__).parent.parent / "configs" / "default.yaml"
