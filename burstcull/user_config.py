"""
User configuration management for burstcull.

Supports configuration from multiple sources (in order of priority):
1. Runtime parameters (highest priority)
2. Environment variables
3. User config file (~/.burstcull/config.json)
4. Default values from config.py (lowest priority)

Configuration file location: ~/.burstcull/config.json

Example config.json:
{
    "similarity_threshold": 15,
    "ssim_threshold": 0.8,
    "use_ssim_refinement": true,
    "max_group_size": 10,
    "default_workers": 4,
    "max_image_pixels": 500000000,
    "store_db_file": null
}
"""

import json
import os
from pathlib import Path
from typing import Any, Optional
import logging

from .config import (
    DEFAULT_SIMILARITY_THRESHOLD,
    DEFAULT_SSIM_THRESHOLD,
    DEFAULT_MAX_GROUP_SIZE,
    DEFAULT_WORKERS,
    STORE_DB_FILE,
)

logger = logging.getLogger(__name__)


class UserConfig:
    """
    Manages user configuration from file and environment variables.

    Attributes are lazy-loaded and cached for performance.
    """

    _instance: Optional['UserConfig'] = None
    _config_data: Optional[dict] = None

    def __new__(cls):
        """Singleton pattern to ensure one config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory path."""
        env_dir = os.getenv('BURSTCULL_CONFIG_DIR')
        if env_dir:
            return Path(env_dir)

        return Path.home() / '.burstcull'

    @property
    def config_file_path(self) -> Path:
        """Get the configuration file path."""
        return self.config_dir / 'config.json'

    def _load_config_file(self) -> dict:
        """Load configuration from JSON file."""
        if not self.config_file_path.exists():
            return {}

        try:
            with open(self.config_file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                logger.debug(f"Loaded configuration from {self.config_file_path}")
                return data
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config file {self.config_file_path}: {e}")
            return {}

    def _get_config_data(self) -> dict:
        """Get cached config data (lazy loading)."""
        if self._config_data is None:
            self._config_data = self._load_config_file()
        return self._config_data

    def reload(self):
        """Reload configuration from file."""
        self._config_data = None

    def get(self, key: str, default: Any = None, env_var: Optional[str] = None) -> Any:
        """
        Get a configuration value with priority:
        1. Environment variable (if env_var specified)
        2. Config file
        3. Default value

        Args:
            key: Configuration key
            default: Default value if not found
            env_var: Optional environment variable name to check

        Returns:
            Configuration value
        """
        if env_var:
            env_value = os.getenv(env_var)
            if env_value is not None:
                # Parse numbers and booleans; plain strings fall through
                try:
                    return json.loads(env_value)
                except (json.JSONDecodeError, TypeError):
                    return env_value

        config_data = self._get_config_data()
        if key in config_data:
            return config_data[key]

        return default

    @property
    def similarity_threshold(self) -> int:
        """Maximum hex-digit Hamming distance for a pHash match (0-16)."""
        return self.get(
            'similarity_threshold',
            default=DEFAULT_SIMILARITY_THRESHOLD,
            env_var='BURSTCULL_THRESHOLD'
        )

    @property
    def ssim_threshold(self) -> float:
        """Minimum SSIM score to confirm a pHash match (0-1)."""
        return self.get(
            'ssim_threshold',
            default=DEFAULT_SSIM_THRESHOLD,
            env_var='BURSTCULL_SSIM_THRESHOLD'
        )

    @property
    def use_ssim_refinement(self) -> bool:
        """Whether pHash matches are confirmed with SSIM."""
        return bool(self.get(
            'use_ssim_refinement',
            default=True,
            env_var='BURSTCULL_USE_SSIM'
        ))

    @property
    def max_group_size(self) -> int:
        """Largest group the auto-grouper builds (0 = unbounded)."""
        return self.get(
            'max_group_size',
            default=DEFAULT_MAX_GROUP_SIZE,
            env_var='BURSTCULL_MAX_GROUP_SIZE'
        )

    @property
    def default_workers(self) -> int:
        """Number of parallel workers for import hashing."""
        return self.get(
            'default_workers',
            default=DEFAULT_WORKERS,
            env_var='BURSTCULL_WORKERS'
        )

    @property
    def max_image_pixels(self) -> int:
        """Maximum image size in pixels (decompression bomb limit)."""
        return self.get(
            'max_image_pixels',
            default=500_000_000,
            env_var='BURSTCULL_MAX_PIXELS'
        )

    @property
    def store_db_file(self) -> str:
        """Path to the library database."""
        custom = self.get('store_db_file', env_var='BURSTCULL_DB')
        if custom:
            return custom
        return STORE_DB_FILE

    def create_example_config(self) -> bool:
        """Create an example configuration file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        example_config = {
            "_comment": "burstcull user configuration",
            "similarity_threshold": DEFAULT_SIMILARITY_THRESHOLD,
            "ssim_threshold": DEFAULT_SSIM_THRESHOLD,
            "use_ssim_refinement": True,
            "max_group_size": DEFAULT_MAX_GROUP_SIZE,
            "default_workers": DEFAULT_WORKERS,
            "max_image_pixels": 500000000,
            "store_db_file": None,
        }

        try:
            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(example_config, f, indent=2)
            logger.info(f"Created example config file at {self.config_file_path}")
            return True
        except OSError as e:
            logger.error(f"Failed to create example config: {e}")
            return False


# Global instance
_user_config = UserConfig()


def get_user_config() -> UserConfig:
    """Get the global UserConfig instance."""
    return _user_config
