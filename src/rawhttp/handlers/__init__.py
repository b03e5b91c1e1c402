"""
=============================================================================
REQUEST HANDLERS
=============================================================================

A handler turns a parsed request into a response. This server has
exactly one kind of content: files under the document root.

    FileResolver.read(path) → HTTPResponse (200 or 404)

=============================================================================
"""

from .static import FileResolver, FILE_NOT_FOUND_BODY

__all__ = [
    "FileResolver",
    "FILE_NOT_FOUND_BODY",
]
