"""Configuration management for the A* search engine.

Hydra composes ``conf/config.yaml`` (plus any overrides) and the
``search.astar`` group is validated before the engine reads it.
"""

from .config_manager import ConfigManager, load_config, get_config, get_parameter, reset_config
from .validators import validate_config, ConfigValidationError

__all__ = [
    'ConfigManager',
    'load_config',
    'get_config',
    'get_parameter',
    'reset_config',
    'validate_config',
    'ConfigValidationError'
]
