"""
Per-language isolation overlays.

Each builder receives the resolved installation root and returns the
environment variables that make that installation self-consistent. Values are
derived from the root (and, for Go, the user's home); no builder reads an
existing variable of the same name.
"""

from __future__ import annotations

from pathlib import Path

from .context import ResolutionContext


def _major_minor(version: str) -> str:
    parts = version.split(".")
    if len(parts) >= 2:
        return f"{parts[0]}.{parts[1]}"
    return version


def python_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    return {
        "PYTHONPATH": str(root / "lib" / f"python{_major_minor(version)}" / "site-packages"),
        "PYTHONUSERBASE": str(root),
        "PYTHONNOUSERSITE": "1",
    }


def node_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    return {
        "NODE_PATH": str(root / "lib" / "node_modules"),
        "NPM_CONFIG_PREFIX": str(root),
        "NPM_CONFIG_USERCONFIG": str(root / ".npmrc"),
    }


def ruby_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    gems = str(root / "lib" / "ruby" / "gems" / version)
    return {
        "GEM_HOME": gems,
        "GEM_PATH": gems,
        "RUBYLIB": str(root / "lib" / "ruby" / version),
    }


def rust_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    return {
        "RUSTUP_HOME": str(root),
        "CARGO_HOME": str(root),
        "RUSTC": str(root / "bin" / "rustc"),
    }


def go_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    # GOPATH is shared across Go versions; it lives under the user's home
    return {
        "GOROOT": str(root),
        "GOPATH": str(context.home / "go"),
        "GOBIN": str(root / "bin"),
        "GO111MODULE": "on",
    }


def php_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    return {
        "PHP_INI_DIR": str(root / "etc"),
        "COMPOSER_HOME": str(root / ".composer"),
    }


def java_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    return {
        "JAVA_HOME": str(root),
        "JRE_HOME": str(root / "jre"),
        "CLASSPATH": str(root / "lib"),
    }


def dotnet_overlay(root: Path, version: str, context: ResolutionContext) -> dict[str, str]:
    return {
        "DOTNET_ROOT": str(root),
        "DOTNET_CLI_HOME": str(root),
        "DOTNET_TOOLS_PATH": str(root / "tools"),
    }
