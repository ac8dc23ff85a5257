#!/usr/bin/env python3
"""
langshim - toolchain version dispatcher.

Installed under a toolchain command name (python, node, cargo, ...) the
script resolves which managed version handles the call and execs it.
Invoked as itself it offers inspection commands.

Usage:
    python --version 3.11.7 script.py   # via a shim named "python"
    langshim current python             # Show resolved version and origin
    langshim list node                  # Show installed versions
    langshim which python pip           # Show the binary a command maps to
    langshim env go                     # Print the isolation overlay
    langshim use node 18.19.0           # Set the user default
    langshim exec npm install           # Dispatch as if invoked as npm
"""

from __future__ import annotations

import argparse
import json
import os
import shlex
import sys
from typing import Sequence

from langshim.common import is_debug_enabled
from langshim.composer import compose_environment
from langshim.config import Config, load_config
from langshim.context import ResolutionContext
from langshim.dispatcher import dispatch, executable_for, program_name
from langshim.errors import ShimError
from langshim.languages import all_languages, get_language, language_for_command
from langshim.locator import InstallationLocator, set_user_default
from langshim.logging_config import setup_logging
from langshim.resolver import VersionResolver


def shim_directories(argv: Sequence[str]) -> list[str]:
    """Directory holding the invoked shim, when argv[0] carries one."""
    if argv and os.sep in argv[0]:
        return [os.path.dirname(os.path.abspath(argv[0]))]
    return []


def build_context(config: Config, argv: Sequence[str]) -> ResolutionContext:
    return ResolutionContext.from_process(config, exclude_dirs=shim_directories(argv))


def report_error(error: ShimError) -> int:
    print(f"✗ {error.message}", file=sys.stderr)
    if error.remediation:
        print(f"  {error.remediation}", file=sys.stderr)
    return 1


def run_shim(argv: Sequence[str], command: str | None = None) -> int:
    """Dispatch a toolchain command. Returns only on failure."""
    config = load_config()
    verbose = is_debug_enabled()
    setup_logging(level=config.logging.level, log_file=config.logging.file, verbose=verbose)
    context = build_context(config, argv)
    language = language_for_command(command or program_name(argv))
    hint = config.format_install_hint(language.name) if language else ""
    dispatch(argv, context, command=command, install_hint=hint, verbose=verbose)
    return 1


def _resolver(args: argparse.Namespace, config: Config, context: ResolutionContext) -> VersionResolver:
    language = get_language(args.language)
    return VersionResolver(
        language,
        context,
        install_hint=config.format_install_hint(language.name),
        verbose=args.verbose,
    )


def cmd_current(args: argparse.Namespace, config: Config, context: ResolutionContext) -> int:
    """Show the version that would handle an invocation here."""
    resolved = _resolver(args, config, context).resolve(args.pin)
    if args.json:
        print(json.dumps(resolved.to_dict(), indent=2))
    else:
        language = get_language(args.language)
        print(f"{language.display_name} {resolved.version} ({resolved.description})")
        print(f"  {resolved.path}")
    return 0


def cmd_list(args: argparse.Namespace, config: Config, context: ResolutionContext) -> int:
    """Show installed versions, newest first."""
    language = get_language(args.language)
    installed = InstallationLocator(context, verbose=args.verbose).list_installed(language)
    if args.json:
        print(json.dumps(
            [{"version": i.version, "scope": i.scope, "path": str(i.path)} for i in installed],
            indent=2,
        ))
        return 0
    if not installed:
        print(f"No managed {language.display_name} versions installed", file=sys.stderr)
        return 0
    for item in installed:
        print(f"{item.version:<20} {item.scope:<7} {item.path}")
    return 0


def cmd_which(args: argparse.Namespace, config: Config, context: ResolutionContext) -> int:
    """Show the binary a command would run."""
    language = get_language(args.language)
    resolved = _resolver(args, config, context).resolve(args.pin)
    command = args.command or language.primary_binary
    print(executable_for(language, resolved, command, InstallationLocator(context)))
    return 0


def cmd_env(args: argparse.Namespace, config: Config, context: ResolutionContext) -> int:
    """Print the isolation overlay as shell exports."""
    resolved = _resolver(args, config, context).resolve(args.pin)
    overlay = compose_environment(args.language, resolved, context)
    for key in sorted(overlay):
        print(f"export {key}={shlex.quote(overlay[key])}")
    return 0


def cmd_use(args: argparse.Namespace, config: Config, context: ResolutionContext) -> int:
    """Set the user default version."""
    language = get_language(args.language)
    marker = set_user_default(language, args.version, context)
    print(f"✓ {language.display_name} {args.version} is now the user default ({marker})", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="langshim",
        description="Toolchain version dispatcher",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--config",
        help="Configuration file (default: $LANGSHIM_CONFIG, then user and system locations)",
    )
    subparsers = parser.add_subparsers(dest="subcommand", required=True)
    language_names = [language.name for language in all_languages()]

    current = subparsers.add_parser("current", help="Show the resolved version and its origin")
    current.add_argument("language", choices=language_names)
    current.add_argument("--pin", help="Resolve as if --version PIN had been passed")
    current.add_argument("--json", action="store_true", help="JSON output")
    current.set_defaults(handler=cmd_current)

    list_parser = subparsers.add_parser("list", help="Show installed versions")
    list_parser.add_argument("language", choices=language_names)
    list_parser.add_argument("--json", action="store_true", help="JSON output")
    list_parser.set_defaults(handler=cmd_list)

    which = subparsers.add_parser("which", help="Show the binary a command would run")
    which.add_argument("language", choices=language_names)
    which.add_argument("command", nargs="?", help="Command name (default: primary binary)")
    which.add_argument("--pin", help="Resolve as if --version PIN had been passed")
    which.set_defaults(handler=cmd_which)

    env = subparsers.add_parser("env", help="Print the isolation overlay")
    env.add_argument("language", choices=language_names)
    env.add_argument("--pin", help="Resolve as if --version PIN had been passed")
    env.set_defaults(handler=cmd_env)

    use = subparsers.add_parser("use", help="Set the user default version")
    use.add_argument("language", choices=language_names)
    use.add_argument("version")
    use.set_defaults(handler=cmd_use)

    exec_parser = subparsers.add_parser("exec", help="Dispatch as if invoked under COMMAND")
    exec_parser.add_argument("command")
    exec_parser.add_argument("args", nargs=argparse.REMAINDER)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    argv = list(sys.argv if argv is None else argv)

    try:
        if language_for_command(program_name(argv)) is not None:
            return run_shim(argv)

        args = build_parser().parse_args(argv[1:])
        if args.subcommand == "exec":
            return run_shim([args.command, *args.args], command=args.command)

        config = load_config(args.config, verbose=args.verbose)
        setup_logging(
            level=config.logging.level,
            log_file=config.logging.file,
            verbose=args.verbose or is_debug_enabled(),
        )
        context = build_context(config, argv)
        return args.handler(args, config, context)
    except ShimError as e:
        return report_error(e)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
