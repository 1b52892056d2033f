"""
Configuration loader with validation and defaults.
"""
import copy
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from .io_utils import load_yaml

logger = logging.getLogger(__name__)


class Config:
    """
    Configuration container with engine defaults.

    Sections:
        board: normalized ring radii (see BoardGeometry)
        game: default ruleset and 01 target score
        checkout: preferred leaves for setup shots
        share: settings of the share-string codec
    """

    DEFAULTS = {
        "board": {
            "inner_bull_radius": 6.0,
            "outer_bull_radius": 15.0,
            "triple_inner_radius": 55.0,
            "triple_outer_radius": 65.0,
            "double_inner_radius": 90.0,
            "double_outer_radius": 100.0,
        },

        "game": {
            "default_type": "01",
            "default_target_score": 301,
        },

        "checkout": {
            "preferred_leaves": [32, 40, 24, 36, 16, 20],  # Classic doubles to leave
        },

        "share": {
            "id_prefix": "shared-",
            "default_target_score": 301,  # Used to replay 01 links without a target
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """
        Load configuration from file or use defaults.

        Args:
            config_path: Path to config YAML (None = use defaults)
        """
        self.data = copy.deepcopy(self.DEFAULTS)

        if config_path and Path(config_path).exists():
            try:
                user_config = load_yaml(config_path)
                self._merge_config(user_config)
                logger.info(f"Configuration loaded from {config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config: {e}, using defaults")
        else:
            logger.info("Using default configuration")

    @classmethod
    def from_dict(cls, overrides: Dict[str, Any]) -> "Config":
        """Build a config from an in-memory override mapping."""
        config = cls()
        config._merge_config(overrides)
        return config

    def _merge_config(self, user_config: Dict[str, Any]) -> None:
        """Merge user config with defaults."""
        if not isinstance(user_config, dict):
            logger.warning("Ignoring config that is not a mapping")
            return

        for section, values in user_config.items():
            if section in self.data and isinstance(values, dict):
                self.data[section].update(values)
            else:
                self.data[section] = values

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get config value."""
        return self.data.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire config section."""
        return self.data.get(section, {})
