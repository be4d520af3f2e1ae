"""
File operations module for dirscope.

This module contains the FileOperations class that applies fixes chosen after
a comparison by copying entries from one tree to the other.
"""

import errno
import logging
import os
import shutil
from typing import Iterable, List

from dirscope.errors import TypeMismatchError
from dirscope.models import CopyError

# Configure module logger
logger = logging.getLogger(__name__)


class FileOperations:
    """
    Copies entries between two directory trees.

    Each requested path is copied from the source root to the same relative
    location below the destination root, recursively for directories and
    overwriting whatever is already there. Failures are collected per path;
    only a full disk aborts the whole batch. All operations support dry-run
    mode for previewing.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """
        Create a FileOperations instance.

        Parameters:
            dry_run (bool): If True, log what would be copied without making filesystem changes.
        """
        self.dry_run = dry_run

    def copy_entries(
        self,
        source_root: str,
        destination_root: str,
        relative_paths: Iterable[str],
    ) -> List[CopyError]:
        """
        Copy each relative path from `source_root` to `destination_root`.

        Parameters:
            source_root (str): Root of the tree to copy from.
            destination_root (str): Root of the tree to copy into.
            relative_paths (Iterable[str]): Paths relative to both roots; files or directories.

        Returns:
            List[CopyError]: One record per path that could not be copied. Paths not listed succeeded.

        Raises:
            OSError: Re-raised when the destination disk is full (errno 28) to abort the batch.
        """
        source_root = os.fspath(source_root)
        destination_root = os.fspath(destination_root)
        errors: List[CopyError] = []

        for relative_path in relative_paths:
            try:
                source, destination = self._resolve(source_root, destination_root, relative_path)
                self._copy_entry(source, destination)
            except TypeMismatchError as e:
                logger.warning("Skipped %s: %s", relative_path, e.message)
                errors.append(CopyError(path=relative_path, message=e.message))
            except ValueError as e:
                logger.warning("Skipped %s: %s", relative_path, e)
                errors.append(CopyError(path=relative_path, message=str(e)))
            except OSError as e:
                if e.errno == errno.ENOSPC:
                    logger.critical("Disk full - aborting copy: %s", e)
                    raise
                logger.warning("Error copying %s: %s", relative_path, e)
                errors.append(CopyError(path=relative_path, message=str(e)))

        return errors

    def _resolve(self, source_root: str, destination_root: str, relative_path: str):
        """
        Join `relative_path` onto both roots.

        Raises:
            ValueError: If the path is absolute or points outside the roots.
        """
        normalized = os.path.normpath(relative_path)
        if (
            os.path.isabs(relative_path)
            or normalized == os.curdir
            or normalized == os.pardir
            or normalized.startswith(os.pardir + os.sep)
        ):
            raise ValueError(f"Not a path inside the tree: {relative_path}")
        return (
            os.path.join(source_root, normalized),
            os.path.join(destination_root, normalized),
        )

    def _copy_entry(self, source: str, destination: str) -> None:
        """
        Copy a file or a directory tree to `destination`, overwriting existing content.

        Raises:
            TypeMismatchError: If a directory would replace a file or a file would replace a directory.
            OSError: If the source is missing or any filesystem operation fails.
        """
        if os.path.isdir(source):
            if os.path.lexists(destination) and not os.path.isdir(destination):
                raise TypeMismatchError(destination, "Cannot replace a file with a directory")
            if self.dry_run:
                logger.debug(f"[DRY RUN] Would copy directory: {source} -> {destination}")
                return
            self._copy_directory(source, destination)
        else:
            if not os.path.lexists(source):
                raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), source)
            if os.path.isdir(destination):
                raise TypeMismatchError(destination, "Cannot replace a directory with a file")
            if self.dry_run:
                logger.debug(f"[DRY RUN] Would copy: {source} -> {destination}")
                return
            self._copy_file(source, destination)

    def _copy_file(self, source: str, destination: str) -> None:
        """
        Copy a file, creating parent directories as needed and preserving file metadata.
        """
        os.makedirs(os.path.dirname(destination), exist_ok=True)
        shutil.copy2(source, destination, follow_symlinks=False)
        logger.debug(f"Copied file: {source} -> {destination}")

    def _copy_directory(self, source: str, destination: str) -> None:
        """
        Copy a directory tree, merging into an existing destination directory.

        Raises:
            OSError: Collected per-file failures are raised as a single error,
                with errno ENOSPC if any of them was a full disk.
        """
        try:
            shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
        except shutil.Error as e:
            # copytree collects (src, dst, reason) triples before raising
            failures = e.args[0] if e.args and isinstance(e.args[0], list) else []
            if any(_is_disk_full(reason) for _, _, reason in failures):
                raise OSError(errno.ENOSPC, os.strerror(errno.ENOSPC), destination) from e
            details = "; ".join(str(reason) for _, _, reason in failures) or str(e)
            raise OSError(f"Some entries could not be copied: {details}") from e
        logger.debug(f"Copied directory: {source} -> {destination}")


def _is_disk_full(reason: object) -> bool:
    """Whether a copytree failure reason (usually the str() of an OSError) reports ENOSPC."""
    if isinstance(reason, OSError):
        return reason.errno == errno.ENOSPC
    return f"[Errno {errno.ENOSPC}]" in str(reason)
