"""Hydra composition of the ``search.astar`` configuration group.

The engine only ever reads ``search.astar``; this module composes it from a
config directory (``conf/`` at the repository root by default), validates it
and remembers the most recent result so ``AStarSearcher`` can fall back to it.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from omegaconf import DictConfig, OmegaConf
from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra

from .validators import validate_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "conf"

# Configuration composed by the most recent load_config() call
_loaded_config: Optional[DictConfig] = None


class ConfigManager:
    """Composes search configurations from one Hydra config directory."""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Directory holding ``config.yaml``. Defaults to the
                repository's ``conf`` directory.

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        self.config_dir = Path(config_dir or DEFAULT_CONFIG_DIR).resolve()
        self.config: Optional[DictConfig] = None

        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Configuration directory not found: {self.config_dir}")

    def load_config(self,
                    config_name: str = "config",
                    overrides: Optional[List[str]] = None,
                    validate: bool = True) -> DictConfig:
        """Compose ``config_name`` with Hydra overrides.

        Args:
            config_name: Name of the main config file (without .yaml)
            overrides: Hydra overrides, e.g. ``search.astar.tie_break=fifo``
            validate: Whether to check the ``search.astar`` group

        Returns:
            The composed configuration

        Raises:
            ConfigValidationError: If validation is requested and fails
        """
        GlobalHydra.instance().clear()
        with initialize_config_dir(config_dir=str(self.config_dir), version_base=None):
            cfg = compose(config_name=config_name, overrides=overrides or [])

        if validate:
            validate_config(cfg)

        self.config = cfg
        logger.info(f"Composed {config_name} from {self.config_dir}"
                    + (f" with overrides {overrides}" if overrides else ""))
        return cfg

    def get_parameter(self, key: str, default: Any = None) -> Any:
        """Read a dotted key such as ``search.astar.total_nodes_bound``."""
        if self.config is None:
            raise RuntimeError("No configuration loaded. Call load_config() first.")

        return OmegaConf.select(self.config, key, default=default)


def load_config(config_name: str = "config",
                overrides: Optional[List[str]] = None,
                config_dir: Optional[Union[str, Path]] = None,
                validate: bool = True) -> DictConfig:
    """Compose a configuration and make it the process default.

    ``AStarSearcher`` instances built without an explicit ``SearchConfig``
    read their bounds from the configuration loaded here.
    """
    global _loaded_config

    cfg = ConfigManager(config_dir).load_config(config_name, overrides, validate)
    _loaded_config = cfg
    return cfg


def get_config() -> Optional[DictConfig]:
    """The most recently loaded configuration, or None."""
    return _loaded_config


def reset_config() -> None:
    global _loaded_config
    _loaded_config = None


def get_parameter(key: str, default: Any = None) -> Any:
    """Read a dotted key from the most recently loaded configuration."""
    if _loaded_config is None:
        logger.warning("No configuration loaded")
        return default

    return OmegaConf.select(_loaded_config, key, default=default)
