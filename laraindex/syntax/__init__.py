"""Parse-tree collaborators."""

from .php import CallSite, PhpDocument, PhpParser

__all__ = ["CallSite", "PhpDocument", "PhpParser"]
