"""
langshim - Toolchain version dispatcher.

Core Modules:
- Resolution: ranked version sources, installation lookup, manifest heuristics
- Composition: per-language isolation overlays
- Launch: process replacement (POSIX) or spawn-and-wait, argument filtering
- Foundation: invocation context, configuration, logging, errors
"""

__version__ = "1.0.0"
__author__ = "langshim Contributors"

VERSION = __version__

# Foundation
from .config import Config, PathsConfig, LoggingConfig, load_config, load_config_file, validate_config
from .context import ResolutionContext
from .errors import (
    ShimError,
    UnknownLanguage,
    PinnedNotFound,
    Unresolved,
    VersionFileError,
    ExecFailure,
    ConfigError,
)

# Registry
from .languages import (
    LanguageDescriptor,
    LANGUAGES,
    get_language,
    all_languages,
    language_for_command,
    read_version_file,
)
from .manifests import extract_version_from_range

# Resolution
from .locator import InstallationLocator, InstalledVersion, set_user_default
from .resolver import VersionSource, ResolvedVersion, VersionResolver, resolve_version

# Composition and launch
from .composer import EnvironmentComposer, compose_environment
from .launcher import (
    ProcessLauncher,
    ExecLauncher,
    SpawnLauncher,
    default_launcher,
    filter_arguments,
)
from .dispatcher import DispatchPlan, dispatch, plan_dispatch, extract_version_override

# Logging configuration
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Foundation
    "Config",
    "PathsConfig",
    "LoggingConfig",
    "load_config",
    "load_config_file",
    "validate_config",
    "ResolutionContext",
    "ShimError",
    "UnknownLanguage",
    "PinnedNotFound",
    "Unresolved",
    "VersionFileError",
    "ExecFailure",
    "ConfigError",
    # Registry
    "LanguageDescriptor",
    "LANGUAGES",
    "get_language",
    "all_languages",
    "language_for_command",
    "read_version_file",
    "extract_version_from_range",
    # Resolution
    "InstallationLocator",
    "InstalledVersion",
    "set_user_default",
    "VersionSource",
    "ResolvedVersion",
    "VersionResolver",
    "resolve_version",
    # Composition and launch
    "EnvironmentComposer",
    "compose_environment",
    "ProcessLauncher",
    "ExecLauncher",
    "SpawnLauncher",
    "default_launcher",
    "filter_arguments",
    "DispatchPlan",
    "dispatch",
    "plan_dispatch",
    "extract_version_override",
    # Logging
    "setup_logging",
    "get_logger",
]
