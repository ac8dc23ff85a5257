"""
Explicit per-invocation context.

Resolution and environment composition read the working directory, the
environment, and the managed tree roots only through a ResolutionContext, so
both are pure functions of their inputs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from .common import expand_path, is_interactive
from .config import Config


def _frozen_environ(environ: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(environ))


@dataclass(frozen=True)
class ResolutionContext:
    """
    Snapshot of everything an invocation depends on.

    Attributes:
        cwd: Working directory resolution starts from
        environ: Environment snapshot handed to the launched program
        home: User home directory
        user_root: User-scope managed tree
        system_root: System-scope managed tree
        interactive: Whether the invocation is attached to a terminal
        search_path: PATH used for system lookups (None means environ's PATH)
    """
    cwd: Path
    environ: Mapping[str, str] = field(default_factory=dict)
    home: Path = field(default_factory=Path.home)
    user_root: Path = field(default_factory=lambda: expand_path("~/.local/share/langshim"))
    system_root: Path = Path("/usr/local/share/langshim")
    interactive: bool = False
    search_path: str | None = None

    def __post_init__(self):
        # Keep the snapshot immutable regardless of what the caller passed in
        object.__setattr__(self, "environ", _frozen_environ(self.environ))
        object.__setattr__(self, "cwd", Path(self.cwd))
        object.__setattr__(self, "home", Path(self.home))
        object.__setattr__(self, "user_root", Path(self.user_root))
        object.__setattr__(self, "system_root", Path(self.system_root))

    @property
    def path(self) -> str:
        """PATH used to find system-installed binaries."""
        if self.search_path is not None:
            return self.search_path
        return self.environ.get("PATH", "")

    def scope_roots(self) -> tuple[Path, Path]:
        """Managed tree roots in lookup order (user first)."""
        return (self.user_root, self.system_root)

    @classmethod
    def from_process(
        cls,
        config: Config | None = None,
        exclude_dirs: Iterable[str | os.PathLike[str]] = (),
    ) -> ResolutionContext:
        """
        Snapshot the current process.

        Args:
            config: Loaded configuration (default: built-in defaults)
            exclude_dirs: Directories dropped from the PATH used for system
                lookups (the shim's own directory)

        Returns:
            ResolutionContext for this invocation
        """
        config = config or Config()
        environ = dict(os.environ)
        home = Path.home()
        search_path = strip_path_entries(environ.get("PATH", ""), exclude_dirs)
        return cls(
            cwd=Path.cwd(),
            environ=environ,
            home=home,
            user_root=expand_path(config.paths.user_root, home),
            system_root=expand_path(config.paths.system_root, home),
            interactive=is_interactive(),
            search_path=search_path,
        )


def strip_path_entries(path: str, exclude_dirs: Iterable[str | os.PathLike[str]]) -> str:
    """
    Remove directories from a PATH string.

    Entries are compared after resolving symlinks, so a shim directory
    reached through a link is still removed.

    Args:
        path: PATH-style string
        exclude_dirs: Directories to remove

    Returns:
        PATH string without the excluded entries, order preserved
    """
    excluded = {os.path.realpath(os.fspath(d)) for d in exclude_dirs}
    if not excluded:
        return path
    kept = [
        entry for entry in path.split(os.pathsep)
        if entry and os.path.realpath(entry) not in excluded
    ]
    return os.pathsep.join(kept)
