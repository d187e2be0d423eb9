"""Engine configuration loading: bundled defaults plus an optional override file."""

import logging
from contextvars import ContextVar, Token
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

EVALUATION_MODES = ("sequential", "concurrent")


class ConfigLoader:
    """Handles engine configuration: bundled local-config.yaml + optional override."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize config loader.

        The bundled local-config.yaml is always loaded first. When config_path
        is given, its top-level keys override the bundled ones.

        Args:
            config_path: Optional path to a YAML file with overrides

        Raises:
            FileNotFoundError: If config_path does not exist
            ValueError: If a config file is not a YAML mapping
        """
        config_file = files('form_validation').joinpath('local-config.yaml')
        self.local_config_path = str(config_file)

        with config_file.open('r') as f:
            self.config = self._check_mapping(yaml.safe_load(f), self.local_config_path)

        self.override_path = None
        if config_path is not None:
            self.override_path = Path(config_path)
            if not self.override_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
            overrides = self._check_mapping(self._load_yaml(self.override_path), str(config_path))
            self.config = {**self.config, **overrides}
            logger.debug(f"Loaded config overrides from {config_path}: {sorted(overrides)}")

    def _load_yaml(self, path: Path) -> Any:
        """Load YAML file from disk."""
        with open(path) as f:
            return yaml.safe_load(f)

    @staticmethod
    def _check_mapping(data: Any, source: str) -> Dict[str, Any]:
        # An empty file is an empty config
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config in {source} must be a mapping, got {type(data).__name__}")
        return data

    def get_config(self) -> Dict[str, Any]:
        """Get the merged configuration."""
        return self.config

    def get_evaluation_mode(self) -> str:
        """
        Get how rules are evaluated within one validation pass.

        Returns:
            "sequential" (one rule at a time, schema order) or "concurrent"

        Raises:
            ValueError: If the configured mode is unknown
        """
        mode = self.config.get('evaluation_mode', 'sequential')
        if mode not in EVALUATION_MODES:
            raise ValueError(
                f"Unknown evaluation_mode '{mode}'. Must be one of: {', '.join(EVALUATION_MODES)}"
            )
        return mode

    def get_remote_timeout(self) -> float:
        """Get timeout in seconds for rules that call remote endpoints."""
        timeout = self.config.get('remote_timeout_seconds', 10)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError(f"remote_timeout_seconds must be a positive number, got {timeout!r}")
        return float(timeout)

    def get_slow_rule_threshold_ms(self) -> float:
        """Get duration above which a single rule evaluation is logged as slow."""
        return float(self.config.get('log_slow_rules_ms', 250))


_default_config: Optional[ConfigLoader] = None


def get_default_config() -> ConfigLoader:
    """Return the shared ConfigLoader for the bundled defaults, loading it on first use."""
    global _default_config
    if _default_config is None:
        _default_config = ConfigLoader()
    return _default_config


# Config of the engine whose validate() is currently running in this context.
# Copied into tasks and worker threads spawned from it.
_active_config: ContextVar[Optional[ConfigLoader]] = ContextVar('active_config', default=None)


def get_active_config() -> ConfigLoader:
    """Return the config of the running validation, or the bundled defaults outside one."""
    return _active_config.get() or get_default_config()


def set_active_config(config: ConfigLoader) -> Token:
    """Make config active for the current context; pass the token to reset_active_config()."""
    return _active_config.set(config)


def reset_active_config(token: Token) -> None:
    _active_config.reset(token)
