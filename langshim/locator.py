"""
Managed installation lookup.

An installation of <language> <version> lives at
<scope>/languages/<language>/<version>/ and counts as present only when
bin/<primary-binary> inside it is a regular file. The user scope is checked
before the system scope; the first match wins.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from packaging.version import InvalidVersion, Version

from .common import vlog
from .context import ResolutionContext
from .errors import PinnedNotFound
from .languages import LanguageDescriptor


SYSTEM_VERSION = "system"
DEFAULT_MARKER = "current"


@dataclass(frozen=True)
class InstalledVersion:
    """
    One managed installation found on disk.

    Attributes:
        version: Version directory name
        path: Installation root
        scope: "user" or "system"
    """
    version: str
    path: Path
    scope: str


def language_dir(scope_root: Path, language: str) -> Path:
    """<scope>/languages/<language>"""
    return scope_root / "languages" / language


def installation_path(scope_root: Path, language: str, version: str) -> Path:
    """<scope>/languages/<language>/<version>"""
    return language_dir(scope_root, language) / version


def marker_path(scope_root: Path, language: str) -> Path:
    """Default-version marker: <scope>/languages/<language>/current"""
    return language_dir(scope_root, language) / DEFAULT_MARKER


def is_valid_version_name(version: str) -> bool:
    """A version must name a single directory below the language dir."""
    if not version or version in {".", "..", DEFAULT_MARKER}:
        return False
    return "/" not in version and "\\" not in version and "\0" not in version


def is_valid_installation(path: Path, primary_binary: str) -> bool:
    """
    Check if a directory holds a usable installation.

    Args:
        path: Installation root
        primary_binary: Binary that must exist under bin/

    Returns:
        True if <path>/bin/<primary_binary> is a regular file
    """
    return (path / "bin" / primary_binary).is_file()


class InstallationLocator:
    """Answers "is <language> <version> installed, and where?" for one context."""

    def __init__(self, context: ResolutionContext, verbose: bool = False):
        self.context = context
        self.verbose = verbose

    def locate(self, language: LanguageDescriptor, version: str) -> Path | None:
        """
        Find an installation of a version.

        Args:
            language: Language descriptor
            version: Version string, or "system" for the PATH toolchain

        Returns:
            Installation root (or, for "system", the PATH-resolved binary),
            None if not installed
        """
        if version == SYSTEM_VERSION:
            return self.find_system_binary(language)

        if not is_valid_version_name(version):
            vlog(f"Ignoring malformed {language.name} version {version!r}", self.verbose)
            return None

        for scope_root in self.context.scope_roots():
            candidate = installation_path(scope_root, language.name, version)
            if is_valid_installation(candidate, language.primary_binary):
                return candidate
        return None

    def find_system_binary(self, language: LanguageDescriptor) -> Path | None:
        """Resolve the language's primary binary via the context's PATH."""
        return self.which(language.primary_binary)

    def which(self, binary: str) -> Path | None:
        """PATH lookup of any binary using the context's PATH."""
        found = shutil.which(binary, path=self.context.path)
        return Path(found) if found else None

    def list_installed(self, language: LanguageDescriptor) -> list[InstalledVersion]:
        """
        Enumerate valid installations in both scopes.

        A version present in both scopes is reported once, from the scope
        locate() would pick. Results are sorted newest first.
        """
        found: dict[str, InstalledVersion] = {}
        for scope, scope_root in zip(("user", "system"), self.context.scope_roots()):
            base = language_dir(scope_root, language.name)
            if not base.is_dir():
                continue
            for entry in base.iterdir():
                if entry.name in found or not is_valid_version_name(entry.name):
                    continue
                if entry.is_dir() and is_valid_installation(entry, language.primary_binary):
                    found[entry.name] = InstalledVersion(entry.name, entry, scope)
        return sorted(found.values(), key=lambda item: version_sort_key(item.version), reverse=True)


def version_sort_key(version: str) -> tuple:
    """
    Sort key placing PEP 440-parseable versions above anything else.

    Unparseable names (e.g. "stable", "nightly") order lexically among themselves.
    """
    try:
        return (1, Version(version), "")
    except InvalidVersion:
        return (0, Version("0"), version)


def set_user_default(language: LanguageDescriptor, version: str, context: ResolutionContext) -> Path:
    """
    Record a version as the user default by writing the user "current" marker.

    Args:
        language: Language descriptor
        version: Version to select (must already be installed)
        context: Invocation context

    Returns:
        Path of the written marker file

    Raises:
        PinnedNotFound: If the version is not installed
    """
    if InstallationLocator(context).locate(language, version) is None:
        raise PinnedNotFound(language.name, version)
    marker = marker_path(context.user_root, language.name)
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.write_text(f"{version}\n", encoding="utf-8")
    return marker
