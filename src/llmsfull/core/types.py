"""Core type definitions."""

from typing import NewType

# Document path relative to the docs source directory (e.g., "guide/intro.md")
# Distinct from filesystem Path and from site URLs
DocPath = NewType("DocPath", str)
