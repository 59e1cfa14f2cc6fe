"""
Atomic writes of generated modules.

Generated modules are committed to version control, so a failed or
interrupted regeneration must leave the committed file as it was.
"""

from __future__ import annotations

import ast
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import RncError
from .config import OutputMode

logger = logging.getLogger(__name__)


class GeneratedCodeError(RncError):
    """Generated source that does not parse as Python."""


def check_python_syntax(code: str) -> None:
    try:
        ast.parse(code)
    except SyntaxError as e:
        raise GeneratedCodeError(f"Generated Python code is not valid: {e}") from e


class AtomicWriter:
    """Writes through a temporary sibling file that replaces the target.

    The temporary file lives in the target's directory, so the final
    ``os.replace`` never crosses filesystems.
    """

    def __init__(self, validate_python: Callable[[str], None] | None = None):
        """
        Args:
            validate_python: Check run on the content before the target is
                replaced; defaults to an ``ast.parse`` syntax check
        """
        self.validate_python = validate_python or check_python_syntax

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """
        Replace ``path`` with ``content``.

        Raises:
            GeneratedCodeError: If validation fails; the target is untouched
            OSError: If the file cannot be written
        """
        if validate:
            self.validate_python(content)

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def write_with_mode(self, path: Path, content: str, mode: OutputMode, validate: bool = True) -> bool:
        """
        Write unless ``mode`` says to keep the existing file.

        Returns:
            True if ``path`` was written, False if it already held ``content``

        Raises:
            FileExistsError: If the file exists and ``mode`` is ``error``
            GeneratedCodeError: If validation fails
        """
        if path.exists():
            if mode == OutputMode.ERROR_IF_EXISTS:
                raise FileExistsError(f"Output file already exists: {path}. Use --mode force to overwrite.")
            if mode == OutputMode.SKIP_UNCHANGED and path.read_text(encoding="utf-8") == content:
                logger.debug("%s is up to date", path)
                return False

        self.write(path, content, validate)
        return True
