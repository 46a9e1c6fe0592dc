"""
Per-entity workflows. Each operation takes a storage handle (and the
target id and/or raw form data) and returns a Render or Redirect outcome.
"""
from . import author, book, bookinstance, genre
from .common import Redirect, Render

__all__ = ["author", "book", "bookinstance", "genre", "Redirect", "Render"]
