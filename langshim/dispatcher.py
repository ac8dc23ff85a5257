"""
Invocation pipeline.

argv[0] names the command (the shim is installed under toolchain command
names such as python, npm or cargo), which selects the language; the
resolver picks a version, the composer builds its overlay, and the launcher
hands control to the real binary.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .common import vlog
from .composer import EnvironmentComposer
from .context import ResolutionContext
from .errors import ExecFailure, UnknownLanguage
from .languages import LanguageDescriptor, language_for_command
from .launcher import ProcessLauncher, default_launcher, filter_arguments
from .locator import InstallationLocator
from .resolver import ResolvedVersion, VersionResolver


OVERRIDE_FLAG = "--version"


def program_name(argv: Sequence[str]) -> str:
    """Basename of argv[0]."""
    if not argv or not argv[0]:
        return "langshim"
    return os.path.basename(argv[0])


def extract_version_override(argv: Sequence[str]) -> str | None:
    """
    Version pinned with --version <value>.

    Only the first --version that is followed by a value counts; argv[0] is
    never inspected.
    """
    args = list(argv)
    for i in range(1, len(args) - 1):
        if args[i] == OVERRIDE_FLAG:
            return args[i + 1]
    return None


def executable_for(
    language: LanguageDescriptor,
    resolved: ResolvedVersion,
    command: str,
    locator: InstallationLocator,
) -> Path:
    """
    Path of the binary that serves an invoked command.

    Managed installations use <root>/bin/<binary>. For the system toolchain
    the primary binary is the resolved path itself; other commands are looked
    up on the context's PATH.

    Raises:
        ExecFailure: If the binary does not exist
    """
    binary = language.binary_for(command)
    if resolved.is_system:
        if binary == language.primary_binary:
            return resolved.path
        found = locator.which(binary)
        if found is None:
            raise ExecFailure(binary, "not found on PATH")
        return found

    executable = resolved.path / "bin" / binary
    if not executable.exists():
        raise ExecFailure(str(executable), "Executable not found")
    return executable


@dataclass(frozen=True)
class DispatchPlan:
    """Everything needed to launch, computed before any process is touched."""
    language: LanguageDescriptor
    command: str
    resolved: ResolvedVersion
    executable: Path
    args: tuple[str, ...]
    env_overlay: dict[str, str]


def plan_dispatch(
    argv: Sequence[str],
    context: ResolutionContext,
    command: str | None = None,
    install_hint: str = "",
    verbose: bool = False,
) -> DispatchPlan:
    """
    Resolve, compose and pick the executable for an invocation.

    Args:
        argv: Invocation argv, program name first
        context: Invocation context
        command: Command name to dispatch as (default: basename of argv[0])
        install_hint: Suggestion shown when nothing resolves
        verbose: Enable verbose logging

    Raises:
        UnknownLanguage: If the command belongs to no registered language
        PinnedNotFound, Unresolved, VersionFileError, ExecFailure
    """
    command = command or program_name(argv)
    language = language_for_command(command)
    if language is None:
        raise UnknownLanguage(command)

    vlog(f"Language command detected: {command} (language: {language.name})", verbose)

    locator = InstallationLocator(context, verbose=verbose)
    resolver = VersionResolver(language, context, locator=locator, install_hint=install_hint, verbose=verbose)
    resolved = resolver.resolve(extract_version_override(argv))

    overlay = EnvironmentComposer(context).compose(language, resolved)
    executable = executable_for(language, resolved, command, locator)

    return DispatchPlan(
        language=language,
        command=command,
        resolved=resolved,
        executable=executable,
        args=tuple(filter_arguments(argv)),
        env_overlay=overlay,
    )


def dispatch(
    argv: Sequence[str],
    context: ResolutionContext,
    launcher: ProcessLauncher | None = None,
    command: str | None = None,
    install_hint: str = "",
    verbose: bool = False,
):
    """
    Run an invocation end to end. Does not return when the launch succeeds.

    Raises:
        ShimError: On any resolution or launch failure
    """
    plan = plan_dispatch(argv, context, command=command, install_hint=install_hint, verbose=verbose)
    launcher = launcher or default_launcher(verbose=verbose)
    launcher.launch(plan.executable, plan.args, plan.env_overlay, context.environ)
