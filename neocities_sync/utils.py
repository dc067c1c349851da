"""Utility functions for neocities-sync."""

import hashlib
from pathlib import Path, PurePosixPath

# =============================================================================
# Constants for file operations
# =============================================================================

# Read buffer for hashing (1 MB)
HASH_CHUNK_SIZE: int = 1024 * 1024

# Extensions skipped by --ignore-disallowed-file-types. Compared with the
# leading dot and case-sensitively.
DISALLOWED_FILE_TYPES: frozenset[str] = frozenset(
    f".{ext}"
    for ext in """
    apng asc atom avif bin cjs css csv dae eot epub geojson gif glb gltf gpg htm html
    ico jpeg jpg js json key kml knowl less manifest map markdown md mf mid midi mjs
    mtl obj opml osdx otf pdf pgp pls png py rdf resolveHandle rss sass scss svg text
    toml ts tsv ttf txt webapp webmanifest webp woff woff2 xcf xml yaml yml
    """.split()
)


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_sha1(file_path: Path) -> str:
    """Calculate the SHA-1 digest of a file's raw bytes.

    This is the same digest Neocities reports as ``sha1_hash`` in its
    file listing, so local and remote hashes can be compared directly.

    Args:
        file_path: Path of the file to hash

    Returns:
        Lowercase hex digest (40 characters)

    Raises:
        OSError: If the file cannot be read
    """
    digest = hashlib.sha1()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def is_disallowed_file_type(relative_path: str) -> bool:
    """Check whether a path has an extension from DISALLOWED_FILE_TYPES.

    Examples:
        >>> is_disallowed_file_type("css/site.css")
        True
        >>> is_disallowed_file_type("notes.CSS")
        False
        >>> is_disallowed_file_type("Makefile")
        False
    """
    return PurePosixPath(relative_path).suffix in DISALLOWED_FILE_TYPES
