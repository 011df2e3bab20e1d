"""Command-line interface for studymate."""

from .app import app, main

__all__ = ["app", "main"]
