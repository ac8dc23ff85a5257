"""
Language descriptor registry.

One LanguageDescriptor per supported toolchain: which version files name a
version, which binary proves an installation exists, which commands the
toolchain provides, and how to read its project manifest and build its
environment overlay. Supporting a new language means registering a
descriptor; the resolver and composer have no per-language branches.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from . import manifests, overlays
from .context import ResolutionContext
from .errors import UnknownLanguage, VersionFileError
from .logging_config import debug


ManifestReader = Callable[[Path], "str | None"]
OverlayBuilder = Callable[[Path, str, ResolutionContext], dict[str, str]]

# Names under which the dispatcher itself is installed
DISPATCHER_NAMES = frozenset({"langshim", "shim.py"})


@dataclass(frozen=True)
class LanguageDescriptor:
    """Static description of one supported toolchain."""
    name: str
    display_name: str
    version_files: tuple[str, ...]
    primary_binary: str
    overlay_builder: OverlayBuilder
    commands: dict[str, str] = field(default_factory=dict)  # invoked name -> binary in <root>/bin
    manifest_reader: ManifestReader | None = None

    def binary_for(self, command: str) -> str:
        """Binary inside <root>/bin that serves an invoked command name."""
        return self.commands.get(command, command)


LANGUAGES: dict[str, LanguageDescriptor] = {
    descriptor.name: descriptor
    for descriptor in (
        LanguageDescriptor(
            name="python",
            display_name="Python",
            version_files=(".python-version",),
            primary_binary="python3",
            overlay_builder=overlays.python_overlay,
            commands={"python": "python3", "python3": "python3", "pip": "pip3", "pip3": "pip3"},
            manifest_reader=manifests.read_pyproject,
        ),
        LanguageDescriptor(
            name="node",
            display_name="Node.js",
            version_files=(".nvmrc", ".node-version"),
            primary_binary="node",
            overlay_builder=overlays.node_overlay,
            commands={"node": "node", "npm": "npm", "npx": "npx", "yarn": "yarn"},
            manifest_reader=manifests.read_package_json,
        ),
        LanguageDescriptor(
            name="ruby",
            display_name="Ruby",
            version_files=(".ruby-version",),
            primary_binary="ruby",
            overlay_builder=overlays.ruby_overlay,
            commands={"ruby": "ruby", "gem": "gem", "bundle": "bundle", "irb": "irb"},
            manifest_reader=manifests.read_gemfile,
        ),
        LanguageDescriptor(
            name="rust",
            display_name="Rust",
            version_files=("rust-toolchain.toml", "rust-toolchain"),
            primary_binary="rustc",
            overlay_builder=overlays.rust_overlay,
            commands={"cargo": "cargo", "rustc": "rustc", "rustup": "rustup"},
        ),
        LanguageDescriptor(
            name="go",
            display_name="Go",
            version_files=(".go-version",),
            primary_binary="go",
            overlay_builder=overlays.go_overlay,
            commands={"go": "go", "gofmt": "gofmt"},
            manifest_reader=manifests.read_go_mod,
        ),
        LanguageDescriptor(
            name="php",
            display_name="PHP",
            version_files=(".php-version",),
            primary_binary="php",
            overlay_builder=overlays.php_overlay,
            commands={"php": "php", "composer": "composer"},
        ),
        LanguageDescriptor(
            name="java",
            display_name="Java",
            version_files=(".java-version",),
            primary_binary="java",
            overlay_builder=overlays.java_overlay,
            commands={"java": "java", "javac": "javac", "jar": "jar"},
        ),
        LanguageDescriptor(
            name="dotnet",
            display_name=".NET",
            version_files=("global.json",),
            primary_binary="dotnet",
            overlay_builder=overlays.dotnet_overlay,
            commands={"dotnet": "dotnet"},
            manifest_reader=manifests.read_csproj,
        ),
    )
}

COMMAND_MAP: dict[str, str] = {
    command: descriptor.name
    for descriptor in LANGUAGES.values()
    for command in descriptor.commands
}


def get_language(name: str) -> LanguageDescriptor:
    """
    Get a language descriptor by name.

    Raises:
        UnknownLanguage: If the language is not registered
    """
    try:
        return LANGUAGES[name.lower()]
    except KeyError:
        raise UnknownLanguage(name) from None


def all_languages() -> list[LanguageDescriptor]:
    """All registered languages in registration order."""
    return list(LANGUAGES.values())


def language_for_command(program_name: str) -> LanguageDescriptor | None:
    """
    Map an invoked program name (argv[0] basename) to its language.

    Returns:
        Descriptor, or None when the name is the dispatcher itself or unknown
    """
    if program_name in DISPATCHER_NAMES:
        return None
    language = COMMAND_MAP.get(program_name)
    return LANGUAGES[language] if language else None


def _toml_channel(content: str) -> str:
    data = tomllib.loads(content)
    toolchain = data.get("toolchain")
    channel = toolchain.get("channel") if isinstance(toolchain, dict) else None
    return channel if isinstance(channel, str) else ""


def _global_json_sdk(content: str) -> str:
    data = json.loads(content)
    sdk = data.get("sdk") if isinstance(data, dict) else None
    version = sdk.get("version") if isinstance(sdk, dict) else None
    return version if isinstance(version, str) else ""


# Structured version files; everything else is a single trimmed token
VERSION_FILE_PARSERS: dict[str, Callable[[str], str]] = {
    "rust-toolchain.toml": _toml_channel,
    "global.json": _global_json_sdk,
}


def read_version_file(path: Path) -> str | None:
    """
    Read the version named by a version file.

    Args:
        path: Candidate version file

    Returns:
        Trimmed version string, or None when the file is absent, empty, or
        carries no version

    Raises:
        VersionFileError: If the file exists but cannot be read
    """
    if not path.is_file():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise VersionFileError(str(path), str(e)) from e

    parser = VERSION_FILE_PARSERS.get(path.name)
    if parser is not None:
        try:
            content = parser(content)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
            debug(f"Ignoring malformed {path}: {e}")
            return None

    version = content.strip()
    return version or None


def read_version_in_dir(descriptor: LanguageDescriptor, directory: Path) -> str | None:
    """First non-empty version among the language's version files in a directory."""
    for file_name in descriptor.version_files:
        version = read_version_file(directory / file_name)
        if version:
            return version
    return None
