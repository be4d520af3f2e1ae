"""Pytest fixtures for dirscope tests."""

import io
import os
import platform
import tempfile
from pathlib import Path
from typing import Dict, Generator, Optional

import pytest
from rich.console import Console

from dirscope.models import DirEntry, ErrorEntry, ErrorKind, FileEntry
from dirscope.ui import ReportTUI


def can_restrict_permissions() -> bool:
    """chmod-based tests only work on POSIX and when not running as root."""
    if platform.system() == "Windows":
        return False
    return hasattr(os, "geteuid") and os.geteuid() != 0


def build_tree(root: Path, layout: Dict[str, Optional[bytes]]) -> Path:
    """Create files and directories below ``root`` from a flat layout.

    Keys are "/"-separated relative paths. A ``None`` value creates a
    directory, bytes create a file with that content; parent directories are
    created as needed.

    Args:
        root: Directory to build into (created if missing).
        layout: Mapping of relative path to file content or None.

    Returns:
        The root path.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel_path, content in layout.items():
        target = root.joinpath(*rel_path.split("/"))
        if content is None:
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
    return root


def rel(path: str) -> str:
    """Convert a "/"-separated relative path to the platform separator."""
    return path.replace("/", os.sep)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_files(temp_dir: Path) -> Dict[str, Path]:
    """Create test files of various sizes with known content.

    Creates:
        - empty.txt: 0 bytes
        - small.txt: 1KB with 'a' characters
        - medium.txt: 1MB with 'b' characters

    Returns:
        Dictionary mapping file names to their paths.
    """
    files = {}

    empty_file = temp_dir / "empty.txt"
    empty_file.touch()
    files["empty"] = empty_file

    small_file = temp_dir / "small.txt"
    small_file.write_bytes(b"a" * 1024)
    files["small"] = small_file

    medium_file = temp_dir / "medium.txt"
    medium_file.write_bytes(b"b" * (1024 * 1024))
    files["medium"] = medium_file

    return files


@pytest.fixture
def restricted_file(temp_dir: Path) -> Generator[Optional[Path], None, None]:
    """Create a file with no read permissions.

    Yields:
        Path to the restricted file, or None if permissions cannot be
        enforced (Windows, or running as root).
    """
    if not can_restrict_permissions():
        yield None
        return

    restricted = temp_dir / "restricted.txt"
    restricted.write_text("secret content")

    original_mode = restricted.stat().st_mode
    os.chmod(restricted, 0o000)

    try:
        yield restricted
    finally:
        # Restore permissions for cleanup
        os.chmod(restricted, original_mode)


@pytest.fixture
def identical_trees(temp_dir: Path) -> Dict[str, Path]:
    """Create two trees with the same structure and content.

    Creates (in both a/ and b/):
        ├── readme.txt
        ├── empty/
        └── docs/
            ├── guide.md
            └── img/
                └── logo.png
    """
    layout = {
        "readme.txt": b"hello",
        "empty": None,
        "docs/guide.md": b"# Guide",
        "docs/img/logo.png": b"\x89PNG",
    }
    return {
        "a": build_tree(temp_dir / "a", layout),
        "b": build_tree(temp_dir / "b", layout),
    }


@pytest.fixture
def differing_trees(temp_dir: Path) -> Dict[str, Path]:
    """Create two trees with one difference of each comparable kind.

    Creates:
        a/                          b/
        ├── same.txt                ├── same.txt
        ├── changed.txt (v1)        ├── changed.txt (v2)
        ├── only_a.txt              ├── only_b/
        ├── file1.txt (file)        │   ├── x.txt
        └── subdir/                 │   └── deep/y.txt
            └── kept.txt            ├── file1.txt/ (directory)
                                    │   └── inner.txt
                                    └── subdir/
                                        └── kept.txt
    """
    a = build_tree(
        temp_dir / "a",
        {
            "same.txt": b"same",
            "changed.txt": b"version one",
            "only_a.txt": b"a only",
            "file1.txt": b"a file",
            "subdir/kept.txt": b"kept",
        },
    )
    b = build_tree(
        temp_dir / "b",
        {
            "same.txt": b"same",
            "changed.txt": b"version two",
            "only_b/x.txt": b"x",
            "only_b/deep/y.txt": b"y",
            "file1.txt/inner.txt": b"inner",
            "subdir/kept.txt": b"kept",
        },
    )
    return {"a": a, "b": b}


@pytest.fixture
def usage_tree_dir(temp_dir: Path) -> Path:
    """Create a directory with known sizes for disk usage analysis.

    Creates:
        usage/
        ├── top.bin (10 bytes)
        ├── empty/
        └── photos/
            ├── a.jpg (100 bytes)
            └── 2024/
                ├── b.jpg (200 bytes)
                └── raw/
                    └── c.raw (300 bytes)
    """
    return build_tree(
        temp_dir / "usage",
        {
            "top.bin": b"t" * 10,
            "empty": None,
            "photos/a.jpg": b"a" * 100,
            "photos/2024/b.jpg": b"b" * 200,
            "photos/2024/raw/c.raw": b"c" * 300,
        },
    )


@pytest.fixture
def sample_usage_tree() -> DirEntry:
    """Build an in-memory usage tree without touching the filesystem.

    Structure (sizes in bytes):
        "" (root)
        ├── notes.txt (5)
        ├── locked (error)
        ├── photos/
        │   ├── a.jpg (100)
        │   └── 2024/
        │       └── b.jpg (200)
        └── photos-old/
            └── 2024/
                └── c.jpg (50)
    """
    photos_2024 = DirEntry.from_children(
        rel("photos/2024"), [FileEntry(rel("photos/2024/b.jpg"), 200)]
    )
    photos = DirEntry.from_children(
        "photos", [FileEntry(rel("photos/a.jpg"), 100), photos_2024]
    )
    old_2024 = DirEntry.from_children(
        rel("photos-old/2024"), [FileEntry(rel("photos-old/2024/c.jpg"), 50)]
    )
    photos_old = DirEntry.from_children("photos-old", [old_2024])
    return DirEntry.from_children(
        "",
        [
            FileEntry("notes.txt", 5),
            ErrorEntry("locked", "Permission denied", ErrorKind.TRAVERSAL),
            photos_old,
            photos,
        ],
    )


@pytest.fixture
def tui_with_captured_output() -> ReportTUI:
    """Create a ReportTUI whose Console writes plain text to a StringIO.

    Access captured output via: tui.console.file.getvalue()
    """
    output = io.StringIO()
    console = Console(file=output, width=200, color_system=None)
    return ReportTUI(console=console)
