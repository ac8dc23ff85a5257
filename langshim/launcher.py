"""
Process hand-off.

Two launch strategies share one interface:

- ExecLauncher replaces the current process image (os.execve). On success
  nothing returns; the shim process becomes the target program.
- SpawnLauncher runs the target as a child, waits, and exits with the
  child's exit code (1 if it was killed by a signal).

The strategy is chosen once, at import time, from the platform.
"""

from __future__ import annotations

import abc
import os
import subprocess
import sys
from pathlib import Path
from typing import Mapping, NoReturn, Sequence

from .common import vlog
from .composer import merged_environment
from .errors import ExecFailure


# Flags consumed by the dispatcher; each takes one value
RESERVED_FLAGS = ("--version",)


def filter_arguments(argv: Sequence[str], reserved: Sequence[str] = RESERVED_FLAGS) -> list[str]:
    """
    Arguments to forward to the launched program.

    Drops argv[0] and every reserved flag together with its value; all other
    arguments are kept verbatim and in order.

    Args:
        argv: Full invocation argv, program name first
        reserved: Flags owned by the dispatcher

    Returns:
        Forwarded argument list
    """
    filtered: list[str] = []
    skip_next = False
    for arg in list(argv)[1:]:
        if skip_next:
            skip_next = False
            continue
        if arg in reserved:
            skip_next = True
            continue
        filtered.append(arg)
    return filtered


class ProcessLauncher(abc.ABC):
    """Transfers control to a resolved executable."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    @abc.abstractmethod
    def launch(
        self,
        executable: Path,
        args: Sequence[str],
        env_overlay: Mapping[str, str],
        base_env: Mapping[str, str] | None = None,
    ) -> NoReturn:
        """
        Run the executable with the forwarded args and overlaid environment.

        Args:
            executable: Program to run
            args: Arguments after the program name
            env_overlay: Isolation variables from the composer
            base_env: Ambient environment (default: os.environ)

        Raises:
            ExecFailure: If the program cannot be started
        """

    def _prepare(
        self,
        executable: Path,
        args: Sequence[str],
        env_overlay: Mapping[str, str],
        base_env: Mapping[str, str] | None,
    ) -> tuple[str, list[str], dict[str, str]]:
        program = os.fspath(executable)
        env = merged_environment(os.environ if base_env is None else base_env, env_overlay)
        vlog(f"Executing: {program} with args: {list(args)}", self.verbose)
        return program, [program, *args], env


class ExecLauncher(ProcessLauncher):
    """Replace the current process image."""

    def launch(self, executable, args, env_overlay, base_env=None) -> NoReturn:
        program, argv, env = self._prepare(executable, args, env_overlay, base_env)
        # Buffered output is lost once the image is replaced
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            os.execve(program, argv, env)
        except OSError as e:
            raise ExecFailure(program, e.strerror or str(e)) from e
        raise ExecFailure(program, "exec returned")  # only reachable when execve is stubbed


class SpawnLauncher(ProcessLauncher):
    """Run the target as a child and propagate its exit code."""

    def launch(self, executable, args, env_overlay, base_env=None) -> NoReturn:
        program, argv, env = self._prepare(executable, args, env_overlay, base_env)
        try:
            result = subprocess.run(argv, env=env, check=False)
        except OSError as e:
            raise ExecFailure(program, e.strerror or str(e)) from e
        sys.exit(exit_code_for(result.returncode))


def exit_code_for(returncode: int | None) -> int:
    """Child exit code to propagate; signal deaths (negative codes) become 1."""
    if returncode is None or returncode < 0:
        return 1
    return returncode


def supports_exec() -> bool:
    """Whether this platform replaces process images in place."""
    return os.name == "posix" and hasattr(os, "execve")


LAUNCHER_CLASS: type[ProcessLauncher] = ExecLauncher if supports_exec() else SpawnLauncher


def default_launcher(verbose: bool = False) -> ProcessLauncher:
    """Launcher for this platform."""
    return LAUNCHER_CLASS(verbose=verbose)
