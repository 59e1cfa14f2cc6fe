"""
Black pass over generated modules.

black ships in the ``dev`` extra, so a build without it still produces
valid (unformatted) output.
"""

from __future__ import annotations

import importlib.util
import logging

from ..config import FormatterConfig

logger = logging.getLogger(__name__)


class BlackFormatter:
    """Formats one generated module at a time with a fixed black mode."""

    def __init__(self, config: FormatterConfig):
        self.config = config

    @staticmethod
    def is_available() -> bool:
        return importlib.util.find_spec("black") is not None

    def _mode(self, black):
        versions = set()
        target = getattr(black.TargetVersion, self.config.target_version.upper(), None)
        if target is None:
            logger.warning("Unknown black target version %r; using black's default", self.config.target_version)
        else:
            versions.add(target)
        return black.Mode(
            target_versions=versions,
            line_length=self.config.line_length,
            string_normalization=self.config.string_normalization,
            magic_trailing_comma=self.config.magic_trailing_comma,
        )

    def format(self, code: str) -> str:
        """
        Format a generated module.

        Args:
            code: Module source produced by a backend

        Returns:
            The formatted source, or ``code`` unchanged when black is not installed
        """
        if not self.is_available():
            logger.warning("black is not installed; %d bytes of generated code left unformatted", len(code))
            return code

        import black

        return black.format_str(code, mode=self._mode(black))
