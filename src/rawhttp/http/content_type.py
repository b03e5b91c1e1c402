"""
=============================================================================
CONTENT-TYPE CLASSIFICATION
=============================================================================

Decides between the only two content types this server ever sends:

    text/html; charset=utf-8
    text/plain; charset=utf-8

=============================================================================
TWO STRATEGIES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  content_type_for(path, body)                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. EXTENSION LOOKUP                                                │
    │      └── "notes.txt"  → .txt  → text/plain                          │
    │      └── "index.html" → .html → text/html                           │
    │                                                                      │
    │   2. BODY SNIFFING (fallback for unknown / missing suffix)           │
    │      └── "<!DOCTYPE html>..." → text/html                           │
    │      └── "<html>..."          → text/html                           │
    │      └── anything else        → text/plain                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Sniffing is a heuristic. It is case-sensitive and only knows two
prefixes, so "<!doctype html>" or "<HTML>" are classified as plain
text, and a text file that happens to begin with "<html" is called
HTML. The extension table runs first for exactly that reason.

=============================================================================
"""

from pathlib import PurePosixPath
from typing import Optional


HTML_CONTENT_TYPE = "text/html; charset=utf-8"
PLAIN_CONTENT_TYPE = "text/plain; charset=utf-8"

# Prefixes that mark a body as HTML (checked after stripping leading whitespace)
HTML_PREFIXES = ("<!DOCTYPE html>", "<html")

EXTENSION_CONTENT_TYPES = {
    ".html": HTML_CONTENT_TYPE,
    ".htm": HTML_CONTENT_TYPE,
    ".txt": PLAIN_CONTENT_TYPE,
}


def classify_body(body: str) -> str:
    """
    Guess the content type from the first characters of the body.

    Examples:
        >>> classify_body("  <!DOCTYPE html><html></html>")
        'text/html; charset=utf-8'

        >>> classify_body("hello world")
        'text/plain; charset=utf-8'
    """
    if body.lstrip().startswith(HTML_PREFIXES):
        return HTML_CONTENT_TYPE
    return PLAIN_CONTENT_TYPE


def content_type_for(path: Optional[str], body: str) -> str:
    """
    Get the Content-Type for a served file.

    Args:
        path: Filesystem or URL path of the file, or None when the body
              does not come from a file (error pages).
        body: The response body, used when the suffix is not in the table.

    Returns:
        Content-Type header value.
    """
    if path:
        suffix = PurePosixPath(path).suffix.lower()
        if suffix in EXTENSION_CONTENT_TYPES:
            return EXTENSION_CONTENT_TYPES[suffix]
    return classify_body(body)
