"""
Configuration file parsing and management.

Supports YAML configuration files (JSON for .json paths).
Merges configurations from multiple sources (explicit → user → system → defaults),
then applies environment variable overrides.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

import yaml

from .common import vlog
from .errors import ConfigError


DEFAULT_USER_ROOT = "~/.local/share/langshim"
DEFAULT_SYSTEM_ROOT = "/usr/local/share/langshim"
DEFAULT_INSTALL_HINT = "langshim {language} install <version>"

CONFIG_ENV_VAR = "LANGSHIM_CONFIG"
USER_ROOT_ENV_VAR = "LANGSHIM_USER_ROOT"
SYSTEM_ROOT_ENV_VAR = "LANGSHIM_SYSTEM_ROOT"

# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    os.path.expanduser("~/.config/langshim/config.yml"),   # User global
    os.path.expanduser("~/.config/langshim/config.yaml"),
    "/etc/langshim/config.yml",                             # System global
    "/etc/langshim/config.yaml",
]

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class PathsConfig:
    """
    Roots of the managed installation trees.

    Attributes:
        user_root: User-scope tree (holds languages/<language>/<version>/)
        system_root: System-wide tree with the same layout
    """
    user_root: str = DEFAULT_USER_ROOT
    system_root: str = DEFAULT_SYSTEM_ROOT

    def __post_init__(self):
        if not self.user_root:
            raise ValueError("paths.user_root must not be empty")
        if not self.system_root:
            raise ValueError("paths.system_root must not be empty")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> PathsConfig:
        """Create PathsConfig from dictionary."""
        return PathsConfig(
            user_root=str(data.get("user_root", DEFAULT_USER_ROOT)),
            system_root=str(data.get("system_root", DEFAULT_SYSTEM_ROOT)),
        )


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging preferences.

    Attributes:
        level: Console log level
        file: Optional log file path
    """
    level: str = "WARNING"
    file: str | None = None

    def __post_init__(self):
        if self.level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid logging level: {self.level}. "
                f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> LoggingConfig:
        """Create LoggingConfig from dictionary."""
        return LoggingConfig(
            level=str(data.get("level", "WARNING")),
            file=data.get("file"),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for the dispatcher.

    Attributes:
        version: Config schema version
        paths: Managed tree roots
        logging: Logging preferences
        install_hint: Command suggested when nothing resolves ({language} placeholder)
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    install_hint: str = DEFAULT_INSTALL_HINT
    source: str = ""

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        return Config(
            version=data.get("version", 1),
            paths=PathsConfig.from_dict(data.get("paths") or {}),
            logging=LoggingConfig.from_dict(data.get("logging") or {}),
            install_hint=data.get("install_hint", DEFAULT_INSTALL_HINT),
            source=source,
        )

    def format_install_hint(self, language: str) -> str:
        """Render the install suggestion for a language."""
        return self.install_hint.replace("{language}", language)

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        merged_paths = PathsConfig(
            user_root=self.paths.user_root if self.paths.user_root != DEFAULT_USER_ROOT else other.paths.user_root,
            system_root=self.paths.system_root if self.paths.system_root != DEFAULT_SYSTEM_ROOT else other.paths.system_root,
        )
        merged_logging = LoggingConfig(
            level=self.logging.level if self.logging.level != "WARNING" else other.logging.level,
            file=self.logging.file or other.logging.file,
        )
        return Config(
            version=self.version,
            paths=merged_paths,
            logging=merged_logging,
            install_hint=self.install_hint if self.install_hint != DEFAULT_INSTALL_HINT else other.install_hint,
            source=self.source or other.source,
        )

    def with_env_overrides(self, environ: Mapping[str, str]) -> Config:
        """Apply LANGSHIM_USER_ROOT / LANGSHIM_SYSTEM_ROOT overrides."""
        user_root = environ.get(USER_ROOT_ENV_VAR) or self.paths.user_root
        system_root = environ.get(SYSTEM_ROOT_ENV_VAR) or self.paths.system_root
        if user_root == self.paths.user_root and system_root == self.paths.system_root:
            return self
        return replace(self, paths=PathsConfig(user_root=user_root, system_root=system_root))


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file (.yml/.yaml, or .json)
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        return Config.from_dict(data, source=file_path)
    except (ValueError, TypeError, AttributeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    environ: Mapping[str, str] | None = None,
    locations: list[str] | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (argument, or $LANGSHIM_CONFIG)
    2. User ~/.config/langshim/config.yml
    3. System /etc/langshim/config.yml
    4. Default configuration
    Environment root overrides are applied last.

    Args:
        custom_path: Optional path to custom configuration file
        environ: Environment snapshot (default: os.environ)
        locations: Standard locations to search (default: CONFIG_LOCATIONS)
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ConfigError: If a custom path is given but cannot be loaded
    """
    env = os.environ if environ is None else environ
    custom_path = custom_path or env.get(CONFIG_ENV_VAR)
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ConfigError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in (CONFIG_LOCATIONS if locations is None else locations):
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config().with_env_overrides(env)

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged.with_env_overrides(env)


def validate_config(config: Config) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: Config object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []

    if os.path.expanduser(config.paths.user_root) == os.path.expanduser(config.paths.system_root):
        warnings.append("paths.user_root and paths.system_root point to the same directory")

    for name in ("user_root", "system_root"):
        value = getattr(config.paths, name)
        if not os.path.isabs(os.path.expanduser(value)):
            warnings.append(f"paths.{name} is relative ({value}); it will depend on the working directory")

    if "{language}" not in config.install_hint:
        warnings.append("install_hint has no {language} placeholder")

    return warnings
