"""
Environment composition.

Builds the isolation overlay for a resolved version. The overlay only adds
variables; it never inspects or clears unrelated ambient ones.
"""

from __future__ import annotations

from typing import Mapping

from .context import ResolutionContext
from .languages import LanguageDescriptor, get_language
from .resolver import ResolvedVersion


class EnvironmentComposer:
    """Produces the environment overlay for a resolved toolchain."""

    def __init__(self, context: ResolutionContext):
        self.context = context

    def compose(self, language: LanguageDescriptor | str, resolved: ResolvedVersion) -> dict[str, str]:
        """
        Build the isolation overlay.

        Args:
            language: Language descriptor or name
            resolved: Result of version resolution

        Returns:
            Variables to set for the launched program; empty for "system"
        """
        if resolved.is_system:
            return {}
        descriptor = get_language(language) if isinstance(language, str) else language
        return dict(descriptor.overlay_builder(resolved.path, resolved.version, self.context))


def compose_environment(
    language: LanguageDescriptor | str,
    resolved: ResolvedVersion,
    context: ResolutionContext,
) -> dict[str, str]:
    """Convenience wrapper around EnvironmentComposer.compose()."""
    return EnvironmentComposer(context).compose(language, resolved)


def merged_environment(base: Mapping[str, str] | None, overlay: Mapping[str, str]) -> dict[str, str]:
    """Ambient environment with the overlay applied on top."""
    env = dict(base or {})
    env.update(overlay)
    return env
