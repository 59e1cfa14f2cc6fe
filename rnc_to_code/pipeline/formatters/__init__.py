"""
Post-processing of generated modules.
"""

from __future__ import annotations

from .black_formatter import BlackFormatter

__all__ = ["BlackFormatter"]
