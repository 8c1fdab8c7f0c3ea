"""Simple YAML configuration loader for Nyaya Live."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "gemini": {
        "live_model": "gemini-2.5-flash-native-audio-preview-09-2025",
        "text_model": "gemini-2.5-flash",
        "analysis_model": "gemini-2.5-pro",
    },
    "audio": {
        "input_sample_rate": 16000,
        "output_sample_rate": 24000,
        "chunk_size": 4096,
        "channels": 1,
    },
    "live": {
        "commit_user_transcript": False,
        "response_timeout_seconds": 0,
    },
    "recovery": {
        "retries": 3,
        "initial_delay": 1.0,
        "timeout": 90.0,
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/nyayalive.log",
        "console_output": True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class NyayaLiveConfig:
    """Nyaya Live configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, only the built-in
                        defaults and environment variables are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is not None and not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        if self.config_file is not None:
            logger.info(f"Loading configuration from: {self.config_file}")
            self.config = _merge(DEFAULT_CONFIG, self._load_config())
        else:
            logger.info("No configuration file given, using defaults")
            self.config = _merge(DEFAULT_CONFIG, {})

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)

            if not config:
                raise ValueError("Configuration file is empty")

            # Resolve relative paths
            self._resolve_paths(config)

            logger.info("Configuration loaded successfully")
            return config

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve Vertex AI service account path
        vertex = config.get('gemini', {}).get('vertex', {})
        if 'credentials_path' in vertex:
            creds_path = vertex['credentials_path']
            if not os.path.isabs(creds_path):
                vertex['credentials_path'] = str(config_dir / creds_path)

        # Resolve log file path
        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'gemini.live_model').

        Args:
            key_path: Dot-separated key path (e.g., 'audio.chunk_size')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'live.response_timeout_seconds')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_api_key(self) -> Optional[str]:
        """Get the Gemini API key from config, falling back to GEMINI_API_KEY / API_KEY."""
        return (self.get('gemini.api_key')
                or os.environ.get('GEMINI_API_KEY')
                or os.environ.get('API_KEY'))

    def get_vertex_credentials_path(self) -> Optional[str]:
        """Get Vertex AI service account path - CRASHES if configured but missing."""
        creds_path = self.get('gemini.vertex.credentials_path')
        if not creds_path:
            return None

        creds_file = Path(creds_path)
        if not creds_file.exists():
            raise FileNotFoundError(f"Vertex AI credentials file not found: {creds_path}")

        return str(creds_file.absolute())
