"""File hashing utility with caching support.

This module provides the FileHasher class for computing SHA256 content
fingerprints of files with an in-memory cache to avoid hashing the same
unchanged file twice.

Example:
    >>> from dirscope.scanning import FileHasher
    >>> hasher = FileHasher()
    >>> try:
    ...     print(f"SHA256: {hasher.hash_file('/path/to/file.txt')}")
    ... except HashError as e:
    ...     print(f"Could not hash: {e.message}")
"""

import hashlib
import logging
import os
from typing import Dict, Tuple, Union

from dirscope.errors import HashError

# Buffer size for chunked file reading (8KB)
CHUNK_SIZE = 8192

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class FileHasher:
    """Computes SHA256 hashes of files with caching support.

    The cache is keyed by (path, modification_time, size) tuples, so a file
    that changes on disk is hashed again on the next request.

    Files are read in CHUNK_SIZE blocks; the whole file is never held in
    memory.

    Attributes:
        _cache: Dictionary mapping (path, mtime_ns, size) tuples to hex digests.
        _cache_hits: Counter for cache hits (for debugging/statistics).
        _cache_misses: Counter for cache misses (for debugging/statistics).

    Example:
        >>> hasher = FileHasher()
        >>> hash1 = hasher.hash_file("file.txt")
        >>> hash2 = hasher.hash_file("file.txt")  # Uses cache
        >>> stats = hasher.get_cache_stats()
        >>> print(f"Hits: {stats['hits']}, Misses: {stats['misses']}")
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        """Initialize the FileHasher with an empty cache.

        Args:
            chunk_size: Number of bytes read per iteration.
        """
        self._chunk_size = chunk_size
        self._cache: Dict[Tuple[str, int, int], str] = {}
        self._cache_hits: int = 0
        self._cache_misses: int = 0

    def hash_file(self, file_path: PathLike) -> str:
        """Compute the SHA256 hex digest of a file.

        Args:
            file_path: Path to the file to hash.

        Returns:
            The lowercase SHA256 hex digest of the file content.

        Raises:
            HashError: If the file cannot be opened or read (missing,
                permission denied, vanished mid-read, I/O error).
        """
        path = os.fspath(file_path)
        try:
            stat_result = os.stat(path)
        except OSError as e:
            raise HashError(path, _describe(e)) from e

        cache_key = (path, stat_result.st_mtime_ns, stat_result.st_size)
        if cache_key in self._cache:
            self._cache_hits += 1
            return self._cache[cache_key]

        self._cache_misses += 1
        digest = self._compute_hash(path)
        self._cache[cache_key] = digest
        return digest

    def _compute_hash(self, path: str) -> str:
        """Compute SHA256 hash by reading file in chunks.

        Raises:
            HashError: If reading fails at any point.
        """
        sha256_hash = hashlib.sha256()
        try:
            with open(path, "rb") as f:
                while True:
                    chunk = f.read(self._chunk_size)
                    if not chunk:
                        break
                    sha256_hash.update(chunk)
        except OSError as e:
            logger.warning("Could not hash %s: %s", path, e)
            raise HashError(path, _describe(e)) from e

        return sha256_hash.hexdigest()

    def clear_cache(self) -> None:
        """Clear the internal hash cache and reset the hit/miss counters."""
        self._cache.clear()
        self._cache_hits = 0
        self._cache_misses = 0

    def get_cache_stats(self) -> Dict[str, int]:
        """Get cache statistics for debugging and monitoring.

        Returns:
            Dictionary containing:
            - 'size': Number of entries in the cache
            - 'hits': Number of cache hits
            - 'misses': Number of cache misses
        """
        return {
            "size": len(self._cache),
            "hits": self._cache_hits,
            "misses": self._cache_misses,
        }


def _describe(error: OSError) -> str:
    """OS error message without the path (the path is carried separately)."""
    return error.strerror or str(error)
