"""Reader and writer for ~/.plm/config.yaml."""
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from plm.core.cache import default_cache_dir
from plm.core.targets import TARGET_NAMES

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PLM_CONFIG"
DEFAULT_TARGETS = ["codex", "copilot"]


def default_config_path() -> Path:
    return Path.home() / ".plm" / "config.yaml"


def _normalize_target(name: str) -> str:
    normalized = str(name).strip().lower()
    if normalized not in TARGET_NAMES:
        raise ValueError(
            f"Unknown target '{name}'. "
            f"Available targets: {', '.join(TARGET_NAMES)}"
        )
    return normalized


@dataclass
class PlmConfig:
    """plm settings."""

    cache_dir: Optional[Path] = None
    targets: List[str] = field(default_factory=lambda: list(DEFAULT_TARGETS))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.cache_dir is None:
            self.cache_dir = default_cache_dir()
        elif isinstance(self.cache_dir, str):
            self.cache_dir = Path(self.cache_dir).expanduser()

        if isinstance(self.targets, str) or not isinstance(self.targets, list):
            raise ValueError("targets must be a list of target names")

        names = [_normalize_target(name) for name in self.targets]
        # Keep registry order so output doesn't depend on how the file lists them.
        self.targets = [name for name in TARGET_NAMES if name in names]

    def is_enabled(self, target: str) -> bool:
        return target in self.targets

    def add_target(self, name: str) -> bool:
        """
        Enable a target.

        Args:
            name: Target name, case-insensitive

        Returns:
            True if the target was added, False if it was already enabled

        Raises:
            ValueError: If the target is unknown
        """
        normalized = _normalize_target(name)
        if normalized in self.targets:
            return False
        self.targets = [t for t in TARGET_NAMES if t in self.targets or t == normalized]
        return True

    def remove_target(self, name: str) -> bool:
        """Disable a target; returns False if it wasn't enabled."""
        normalized = _normalize_target(name)
        if normalized not in self.targets:
            return False
        self.targets.remove(normalized)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Mapping written to config.yaml; a default cache_dir is left out."""
        data: Dict[str, Any] = {}
        if self.cache_dir != default_cache_dir():
            data["cache_dir"] = str(self.cache_dir)
        data["targets"] = list(self.targets)
        return data


def resolve_config_path(explicit: Optional[Path] = None) -> Path:
    """Pick the config file: explicit path, then $PLM_CONFIG, then the default."""
    if explicit is not None:
        return Path(explicit)
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return default_config_path()


def load_config(path: Optional[Path] = None) -> PlmConfig:
    """
    Load and parse config.yaml.

    Args:
        path: Config file; see resolve_config_path

    Returns:
        Parsed PlmConfig, defaults when the file doesn't exist

    Raises:
        yaml.YAMLError: If YAML syntax is invalid
        ValueError: If values are invalid
    """
    path = resolve_config_path(path)
    if not path.exists():
        logger.debug("No config at %s, using defaults", path)
        return PlmConfig()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config {path}: expected a mapping")

    unknown = set(data) - {"cache_dir", "targets"}
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

    return PlmConfig(**data)


def save_config(config: PlmConfig, path: Optional[Path] = None) -> Path:
    """
    Write config.yaml, creating its directory.

    Args:
        config: Settings to write
        path: Config file; see resolve_config_path

    Returns:
        The path written
    """
    path = resolve_config_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(
            config.to_dict(),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True
        )
    logger.debug("Wrote config to %s", path)
    return path
