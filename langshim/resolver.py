"""
Version resolution.

Resolution walks a fixed precedence chain and returns the first version that
is both specified and installed:

1. Command line override (fatal if not installed)
2. Version file in the working directory
3. Version file in a parent directory (up to 5 levels, stopping at a VCS root)
4. Project manifest
5. User default marker
6. System default marker
7. Primary binary on PATH ("system")

Sources 2-6 propose a version; an uninstalled proposal is a decline and the
next source is consulted. Only the override is fatal when uninstalled.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .common import vlog
from .context import ResolutionContext
from .errors import PinnedNotFound, Unresolved
from .languages import LanguageDescriptor, get_language, read_version_file, read_version_in_dir
from .locator import SYSTEM_VERSION, InstallationLocator, marker_path
from .logging_config import debug


MAX_PARENT_LEVELS = 5
VCS_MARKERS = (".git", ".hg", ".svn", ".bzr")


class VersionSource(enum.IntEnum):
    """Resolution sources; a lower value takes precedence."""
    COMMAND_LINE_OVERRIDE = 1
    CURRENT_DIRECTORY_FILE = 2
    PARENT_DIRECTORY_FILE = 3
    PROJECT_MANIFEST = 4
    USER_DEFAULT = 5
    SYSTEM_DEFAULT = 6
    SYSTEM_INSTALLED = 7


@dataclass(frozen=True)
class ResolvedVersion:
    """
    Outcome of one resolution.

    Attributes:
        version: Version string, or "system" for the PATH toolchain
        source: Which source produced it
        path: Installation root, or the PATH-resolved binary for "system"
        description: Human-readable origin, e.g. "User default: 3.12.1"
    """
    version: str
    source: VersionSource
    path: Path
    description: str

    @property
    def is_system(self) -> bool:
        return self.version == SYSTEM_VERSION

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "source": self.source.name.lower(),
            "path": str(self.path),
            "description": self.description,
        }


# (version, description) proposed by a source
Proposal = tuple[str, str]


def is_vcs_root(directory: Path) -> bool:
    """Check if a directory contains a version-control marker."""
    return any((directory / marker).exists() for marker in VCS_MARKERS)


class VersionResolver:
    """Resolves which installed version of one language handles an invocation."""

    def __init__(
        self,
        language: LanguageDescriptor | str,
        context: ResolutionContext,
        locator: InstallationLocator | None = None,
        install_hint: str = "",
        verbose: bool = False,
    ):
        self.language = get_language(language) if isinstance(language, str) else language
        self.context = context
        self.locator = locator or InstallationLocator(context, verbose=verbose)
        self.install_hint = install_hint or f"langshim {self.language.name} install <version>"
        self.verbose = verbose

    def resolve(self, override: str | None = None) -> ResolvedVersion:
        """
        Resolve the version for this invocation.

        Args:
            override: Version pinned on the command line

        Returns:
            ResolvedVersion from the highest-ranked source that yields an
            installed version

        Raises:
            PinnedNotFound: If the override is not installed
            Unresolved: If no source yields a usable version
            VersionFileError: If a version file exists but cannot be read
        """
        name = self.language.name

        if override is not None:
            path = self.locator.locate(self.language, override)
            if path is None:
                raise PinnedNotFound(name, override)
            return self._resolved(override, VersionSource.COMMAND_LINE_OVERRIDE, path,
                                  f"Command line override: {override}")

        for source, propose in self._proposers():
            proposal = propose()
            if proposal is None:
                continue
            version, description = proposal
            path = self.locator.locate(self.language, version)
            if path is None:
                debug(f"{name}: {source.name.lower()} proposed {version}, which is not installed")
                continue
            return self._resolved(version, source, path, description)

        system_binary = self.locator.find_system_binary(self.language)
        if system_binary is not None:
            return self._resolved(SYSTEM_VERSION, VersionSource.SYSTEM_INSTALLED, system_binary,
                                  "System installed version")

        raise Unresolved(name, self.context.interactive, self.install_hint)

    def _resolved(self, version: str, source: VersionSource, path: Path, description: str) -> ResolvedVersion:
        vlog(f"Resolved {self.language.name} {version} ({description}) at {path}", self.verbose)
        return ResolvedVersion(version=version, source=source, path=path, description=description)

    def _proposers(self) -> list[tuple[VersionSource, Callable[[], Proposal | None]]]:
        return [
            (VersionSource.CURRENT_DIRECTORY_FILE, self.check_current_directory),
            (VersionSource.PARENT_DIRECTORY_FILE, self.search_parent_directories),
            (VersionSource.PROJECT_MANIFEST, self.check_project_manifest),
            (VersionSource.USER_DEFAULT, self.get_user_default),
            (VersionSource.SYSTEM_DEFAULT, self.get_system_default),
        ]

    def check_current_directory(self) -> Proposal | None:
        """Version file in the working directory."""
        version = read_version_in_dir(self.language, self.context.cwd)
        if version is None:
            return None
        return version, f"Current directory version file: {version}"

    def search_parent_directories(self) -> Proposal | None:
        """
        Walk upward from the working directory, at most MAX_PARENT_LEVELS.

        A VCS root ends the walk after its own version file is checked,
        whether or not that file exists.
        """
        directory = self.context.cwd
        for level in range(1, MAX_PARENT_LEVELS + 1):
            parent = directory.parent
            if parent == directory:
                break  # filesystem root
            directory = parent

            at_vcs_root = is_vcs_root(directory)
            version = read_version_in_dir(self.language, directory)
            if version is not None:
                return version, f"Parent directory (level {level}): {version}"
            if at_vcs_root:
                debug(f"{self.language.name}: stopping parent search at VCS root {directory}")
                break
        return None

    def check_project_manifest(self) -> Proposal | None:
        """Language-specific manifest heuristic in the working directory."""
        reader = self.language.manifest_reader
        if reader is None:
            return None
        version = reader(self.context.cwd)
        if not version:
            return None
        return version, f"Project manifest: {version}"

    def get_user_default(self) -> Proposal | None:
        """Marker file under the user-scope tree."""
        version = read_version_file(marker_path(self.context.user_root, self.language.name))
        if version is None:
            return None
        return version, f"User default: {version}"

    def get_system_default(self) -> Proposal | None:
        """Marker file under the system-scope tree."""
        version = read_version_file(marker_path(self.context.system_root, self.language.name))
        if version is None:
            return None
        return version, f"System default: {version}"


def resolve_version(
    language: LanguageDescriptor | str,
    context: ResolutionContext,
    override: str | None = None,
    install_hint: str = "",
    verbose: bool = False,
) -> ResolvedVersion:
    """Convenience wrapper around VersionResolver.resolve()."""
    return VersionResolver(language, context, install_hint=install_hint, verbose=verbose).resolve(override)
