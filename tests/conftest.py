"""
Shared fixtures: throwaway managed trees and invocation contexts.

The working directory lives below a directory holding a .git marker, so
parent-directory searches never leave the temporary tree.
"""

from pathlib import Path
from types import SimpleNamespace

import pytest

from langshim.context import ResolutionContext


def install_version(scope_root: Path, language: str, version: str, binaries=("python3",)) -> Path:
    """Create <scope>/languages/<language>/<version>/bin/<binary> files."""
    root = scope_root / "languages" / language / version
    bin_dir = root / "bin"
    bin_dir.mkdir(parents=True, exist_ok=True)
    for binary in binaries:
        target = bin_dir / binary
        target.write_text("#!/bin/sh\nexit 0\n")
        target.chmod(0o755)
    return root


@pytest.fixture
def roots(tmp_path):
    """Directory layout for one test."""
    layout = SimpleNamespace(
        user=tmp_path / "user",
        system=tmp_path / "system",
        home=tmp_path / "home",
        repo=tmp_path / "repo",
        work=tmp_path / "repo" / "work",
        path_bin=tmp_path / "path-bin",
    )
    for directory in (layout.user, layout.system, layout.home, layout.work, layout.path_bin):
        directory.mkdir(parents=True)
    (layout.repo / ".git").mkdir()
    return layout


@pytest.fixture
def make_context(roots):
    """Factory for ResolutionContext objects rooted in the temporary tree."""
    def _make(cwd=None, search_path="", interactive=False, environ=None):
        return ResolutionContext(
            cwd=cwd or roots.work,
            environ=environ if environ is not None else {"PATH": search_path, "HOME": str(roots.home)},
            home=roots.home,
            user_root=roots.user,
            system_root=roots.system,
            interactive=interactive,
            search_path=search_path,
        )
    return _make


@pytest.fixture
def install():
    """install_version helper as a fixture."""
    return install_version


@pytest.fixture
def path_binary(roots):
    """Create an executable in the PATH directory and return its path."""
    def _make(name: str) -> Path:
        target = roots.path_bin / name
        target.write_text("#!/bin/sh\nexit 0\n")
        target.chmod(0o755)
        return target
    return _make
