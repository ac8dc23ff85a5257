"""
Project manifest heuristics.

Shallow, best-effort extraction of a required toolchain version from a
project's own manifest (package.json, pyproject.toml, Gemfile, go.mod,
*.csproj). These are not schema validators: anything unexpected declines.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from .logging_config import debug


RANGE_OPERATORS = "><=^~"

_LEADING_VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?")
_GEMFILE_RUBY_RE = re.compile(r"""^\s*ruby\s+['"]([^'"]+)['"]""")
_GO_DIRECTIVE_RE = re.compile(r"^\s*go\s+(\S+)\s*$")
_TARGET_FRAMEWORK_RE = re.compile(r"<TargetFramework>\s*net(?:coreapp)?(\d+(?:\.\d+)?)[^<]*</TargetFramework>")
_PYTHON_REQUIRES_KEYS = ("python_requires", "requires-python")


def extract_version_from_range(spec: str) -> str | None:
    """
    Reduce a requirement range to a major.minor version.

    Leading comparison operators and whitespace are stripped, the result is
    truncated to major.minor, and a bare major gets ".0" appended.

    Examples:
        ">=18.2.0" -> "18.2"
        "^16" -> "16.0"
        "~3.11" -> "3.11"

    Args:
        spec: Version requirement string

    Returns:
        major.minor string, or None if the range does not start with a number
    """
    cleaned = spec.strip().lstrip(RANGE_OPERATORS).strip()
    match = _LEADING_VERSION_RE.match(cleaned)
    if not match:
        return None
    major, minor = match.group(1), match.group(2)
    return f"{major}.{minor if minor is not None else '0'}"


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        debug(f"Skipping unreadable manifest {path}: {e}")
        return None


def read_package_json(directory: Path) -> str | None:
    """Node: engines.node from package.json."""
    package_json = directory / "package.json"
    if not package_json.is_file():
        return None
    content = _read_text(package_json)
    if content is None:
        return None
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        debug(f"Ignoring invalid {package_json}: {e}")
        return None

    engines = data.get("engines") if isinstance(data, dict) else None
    node_range = engines.get("node") if isinstance(engines, dict) else None
    if not isinstance(node_range, str):
        return None
    return extract_version_from_range(node_range)


def extract_python_version_from_line(line: str) -> str | None:
    """
    Extract the quoted requirement from a line like 'python_requires = ">=3.8"'.

    Returns:
        major.minor string, or None if the line has no quoted value
    """
    for quote in ('"', "'"):
        start = line.find(quote)
        end = line.rfind(quote)
        if start != -1 and end > start:
            return extract_version_from_range(line[start + 1:end])
    return None


def read_pyproject(directory: Path) -> str | None:
    """Python: python_requires / requires-python line in pyproject.toml."""
    pyproject = directory / "pyproject.toml"
    if not pyproject.is_file():
        return None
    content = _read_text(pyproject)
    if content is None:
        return None
    for line in content.splitlines():
        if line.strip().startswith(_PYTHON_REQUIRES_KEYS):
            version = extract_python_version_from_line(line)
            if version:
                return version
    return None


def read_gemfile(directory: Path) -> str | None:
    """Ruby: ruby "x.y.z" directive in Gemfile."""
    gemfile = directory / "Gemfile"
    if not gemfile.is_file():
        return None
    content = _read_text(gemfile)
    if content is None:
        return None
    for line in content.splitlines():
        match = _GEMFILE_RUBY_RE.match(line)
        if match:
            return extract_version_from_range(match.group(1))
    return None


def read_go_mod(directory: Path) -> str | None:
    """Go: go directive in go.mod."""
    go_mod = directory / "go.mod"
    if not go_mod.is_file():
        return None
    content = _read_text(go_mod)
    if content is None:
        return None
    for line in content.splitlines():
        match = _GO_DIRECTIVE_RE.match(line)
        if match:
            return extract_version_from_range(match.group(1))
    return None


def read_csproj(directory: Path) -> str | None:
    """.NET: TargetFramework of the first *.csproj (by name)."""
    for project in sorted(directory.glob("*.csproj")):
        if not project.is_file():
            continue
        content = _read_text(project)
        if content is None:
            continue
        match = _TARGET_FRAMEWORK_RE.search(content)
        if match:
            return extract_version_from_range(match.group(1))
        return None
    return None
