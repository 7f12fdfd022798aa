"""
relplan CLI - command line tools for checking schemas and planning payloads.
"""

from __future__ import annotations

from .main import app, main

__all__ = ["main", "app"]
