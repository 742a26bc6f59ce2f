from __future__ import annotations

"""
FileSystem Infrastructure Layer.

POSIX-style relative paths for generated import specifiers and
all-or-nothing file writes.
"""

import os
import posixpath
import tempfile

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def to_posix(path: str) -> str:
    """Convert an OS-specific relative path to forward slashes."""
    return path.replace(os.sep, "/") if os.sep != "/" else path


def posix_relpath(target: str, start: str) -> str:
    """
    Relative path from ``start`` to ``target`` using forward slashes.

    Generated code always uses '/' in import specifiers regardless of the
    host platform.
    """
    rel = os.path.relpath(os.path.abspath(target), os.path.abspath(start))
    return posixpath.normpath(to_posix(rel))


# -----------------------------------------------------------------------------
# FILE I/O API
# -----------------------------------------------------------------------------

def read_text(path: str) -> str:
    """Read a UTF-8 text file. Errors propagate to the caller."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def write_text_atomic(path: str, content: str) -> None:
    """
    Write ``content`` to ``path`` so that readers see either the old file or
    the complete new one.

    Parent directories are created as needed. The text is staged in a
    temporary sibling file and moved into place with ``os.replace``.

    Raises:
        OSError: If the directory cannot be created or the file written.
    """
    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)

    fd, staging_path = tempfile.mkstemp(
        prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=out_dir
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(staging_path, path)
    except BaseException:
        if os.path.exists(staging_path):
            os.remove(staging_path)
        raise
