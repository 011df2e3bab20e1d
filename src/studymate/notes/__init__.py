"""Notes module: debounced study-notes compilation."""

from .compiler import NotesCompiler, NotesState

__all__ = ["NotesCompiler", "NotesState"]
