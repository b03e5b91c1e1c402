"""
=============================================================================
STATIC FILE RESOLUTION
=============================================================================

Maps a request path to a file under the document root and reads it.

=============================================================================
HOW A PATH BECOMES A FILE
=============================================================================

    Request: GET /docs/notes.txt

    1. Normalize       "/"  → "/index.html"   (anything else unchanged)
    2. Concatenate     "public" + "/docs/notes.txt" → "public/docs/notes.txt"
    3. Read            whole file, as UTF-8 text
    4. Respond         200 with contents, or 404 with a fixed body

    ┌──────────────────────┬────────────────────────────────────────────┐
    │  URL PATH            │  FILESYSTEM PATH (document_root="public")  │
    ├──────────────────────┼────────────────────────────────────────────┤
    │  /                   │  public/index.html                         │
    │  /index.html         │  public/index.html                         │
    │  /notes.txt          │  public/notes.txt                          │
    │  /a/b.html           │  public/a/b.html                           │
    │  /../secret.txt      │  public/../secret.txt   (!)                │
    └──────────────────────┴────────────────────────────────────────────┘

=============================================================================
PATH TRAVERSAL
=============================================================================

Step 2 is plain string concatenation. Nothing removes ".." segments, so
"/../secret.txt" reads a file NEXT TO the document root. This is a known
gap, kept as the default behaviour.

With ServerConfig.contain_paths=True the candidate is canonicalized
(".." collapsed, symlinks followed) and must stay inside the document
root; anything else gets the same 404 as a missing file.

=============================================================================
ONE ERROR BUCKET
=============================================================================

Missing file, permission denied, a directory, bytes that are not valid
UTF-8: the client sees the same 404 and the same body for all of them.
The real reason only goes to the log.

Files are read fully into memory. There is no size limit and no
streaming, so this is not the place to serve a 2 GB video.

=============================================================================
"""

import os
import logging
from typing import Optional

from ..http.response import HTTPResponse, ok, not_found
from ..http.content_type import content_type_for


logger = logging.getLogger(__name__)


FILE_NOT_FOUND_BODY = "The requested file was not found"


class FileResolver:
    """
    Resolves request paths under a document root and reads files.

    Usage:
        resolver = FileResolver("public")
        response = resolver.read("/notes.txt")   # 200 or 404
    """

    def __init__(
        self,
        document_root: str,
        index_file: str = "index.html",
        contain_paths: bool = False,
    ):
        """
        Initialize the resolver.

        Args:
            document_root: Prefix joined to every request path. Not required
                           to exist: a missing root just means every request
                           is a 404.
            index_file: File served for "/".
            contain_paths: Reject paths that canonicalize outside the root.
        """
        self.document_root = document_root
        self.index_file = index_file
        self.contain_paths = contain_paths

    def normalize(self, path: str) -> str:
        """Map "/" to the index file; leave every other path alone."""
        if path == "/":
            return f"/{self.index_file}"
        return path

    def resolve(self, path: str) -> str:
        """
        Build the candidate filesystem path for a request path.

        Plain concatenation: no ".." handling, no symlink checks, no
        existence check.
        """
        return f"{self.document_root}{self.normalize(path)}"

    def is_contained(self, file_path: str) -> bool:
        """
        Check that file_path canonicalizes to somewhere inside the root.
        """
        try:
            root = os.path.realpath(self.document_root)
            target = os.path.realpath(file_path)
            return os.path.commonpath([root, target]) == root
        except (OSError, ValueError):
            # ValueError: embedded NUL byte, or paths on different drives
            return False

    def read(self, path: str) -> HTTPResponse:
        """
        Read the file for a request path and build the response.

        Args:
            path: Request path as it appeared in the request line.

        Returns:
            200 with the file contents, or 404 with FILE_NOT_FOUND_BODY.
        """
        file_path = self.resolve(path)
        logger.debug(f"Attempting to serve file: {file_path}")

        if self.contain_paths and not self.is_contained(file_path):
            logger.warning(f"Path escapes document root: {path!r}")
            return not_found(FILE_NOT_FOUND_BODY)

        contents = self._read_text(file_path)
        if contents is None:
            return not_found(FILE_NOT_FOUND_BODY)

        return ok(contents, content_type=content_type_for(file_path, contents))

    def _read_text(self, file_path: str) -> Optional[str]:
        """
        Read a whole file as UTF-8, or None if it cannot be read as text.

        newline="" turns off universal-newline translation, so "\\r\\n" in
        the file reaches the client unchanged and Content-Length matches
        the bytes on disk.
        """
        try:
            with open(file_path, encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            logger.info(f"File not found: {file_path}")
        except UnicodeDecodeError as e:
            logger.warning(f"File is not valid UTF-8: {file_path} ({e.reason})")
        except (OSError, ValueError) as e:
            # IsADirectoryError, PermissionError, embedded NUL in path, ...
            logger.warning(f"Failed to read {file_path}: {e}")
        return None
