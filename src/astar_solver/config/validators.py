"""Configuration validation for the A* search engine."""

import logging
from omegaconf import DictConfig

logger = logging.getLogger(__name__)

TIE_BREAK_CHOICES = ('none', 'fifo', 'lifo')
COUNT_BOUNDS = ('open_list_bound', 'total_nodes_bound', 'max_expansions')


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""
    pass


def validate_config(config: DictConfig) -> None:
    """Validate the complete configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        validate_search_config(config.get('search', {}))

        logger.debug("Configuration validation passed")

    except Exception as e:
        raise ConfigValidationError(f"Configuration validation failed: {e}")


def validate_search_config(search_config: DictConfig) -> None:
    """Validate search configuration section.

    Bounds may be null (unbounded) or positive numbers.

    Args:
        search_config: Search configuration section
    """
    if not search_config:
        return

    astar_config = search_config.get('astar', {})
    if not astar_config:
        return

    for key in COUNT_BOUNDS:
        value = astar_config.get(key, None)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigValidationError(
                f"astar.{key} must be a positive integer or null, got {value}"
            )

    time_bound = astar_config.get('time_bound_ms', None)
    if time_bound is not None:
        if isinstance(time_bound, bool) or not isinstance(time_bound, (int, float)) or time_bound <= 0:
            raise ConfigValidationError(
                f"astar.time_bound_ms must be a positive number or null, got {time_bound}"
            )

    tie_break = astar_config.get('tie_break', 'none')
    if str(tie_break).lower() not in TIE_BREAK_CHOICES:
        raise ConfigValidationError(
            f"astar.tie_break must be one of {TIE_BREAK_CHOICES}, got {tie_break}"
        )

    for key in ('report_state_path', 'validate_invariants'):
        value = astar_config.get(key, False)
        if not isinstance(value, bool):
            raise ConfigValidationError(f"astar.{key} must be a boolean, got {value}")
