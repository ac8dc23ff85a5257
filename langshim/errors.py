"""
Exception hierarchy for version resolution and process launch.

Every error here is fatal for the invocation: the shim reports it and exits
non-zero before any target process runs.
"""

from __future__ import annotations


class ShimError(Exception):
    """
    Base exception for dispatcher errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


class UnknownLanguage(ShimError):
    """Program name or language is not in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown language or command: {name}")


class PinnedNotFound(ShimError):
    """An explicitly requested version is not installed."""

    def __init__(self, language: str, version: str):
        self.language = language
        self.version = version
        super().__init__(f"Specified version {version} not found for {language}")


class Unresolved(ShimError):
    """No resolution source yielded a usable version."""

    def __init__(self, language: str, interactive: bool, install_hint: str = ""):
        self.language = language
        self.interactive = interactive
        if interactive:
            message = f"{language} not found. Run '{install_hint}' to install a version"
        else:
            message = f"{language} not found and running in non-interactive mode"
        super().__init__(message)


class VersionFileError(ShimError):
    """An existing version file could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to read {path}: {reason}")


class ExecFailure(ShimError):
    """The resolved executable could not be launched."""

    def __init__(self, executable: str, reason: str):
        self.executable = executable
        super().__init__(f"Failed to execute {executable}: {reason}")


class ConfigError(ShimError):
    """An explicitly requested configuration file could not be loaded."""
