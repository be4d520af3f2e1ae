"""Tests for DirectoryComparator."""

import os
from pathlib import Path
from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from conftest import build_tree, can_restrict_permissions, rel
from dirscope.comparison import DirectoryComparator
from dirscope.errors import HashError
from dirscope.models import (
    ComparisonFinding,
    CouldNotCalculateHash,
    CouldNotReadDirectory,
    DifferingContent,
    EntryType,
    MissingInA,
    MissingInB,
    TypeMismatch,
)
from dirscope.scanning import FileHasher, PathWalker


def _mirror(finding: ComparisonFinding) -> ComparisonFinding:
    """The finding expected when the two roots are swapped."""
    if isinstance(finding, MissingInA):
        return MissingInB(path=finding.path)
    if isinstance(finding, MissingInB):
        return MissingInA(path=finding.path)
    if isinstance(finding, TypeMismatch):
        return TypeMismatch(path=finding.path, type_in_a=finding.type_in_b, type_in_b=finding.type_in_a)
    return finding


class TestCompareIdentical:

    def test_identical_trees_have_no_findings(self, identical_trees: Dict[str, Path]) -> None:
        comparator = DirectoryComparator()

        assert comparator.compare(identical_trees["a"], identical_trees["b"]) == []

    def test_tree_compared_with_itself(self, identical_trees: Dict[str, Path]) -> None:
        comparator = DirectoryComparator()

        assert comparator.compare(identical_trees["a"], identical_trees["a"]) == []

    def test_two_empty_trees(self, temp_dir: Path) -> None:
        (temp_dir / "a").mkdir()
        (temp_dir / "b").mkdir()

        assert DirectoryComparator().compare(temp_dir / "a", temp_dir / "b") == []


class TestCompareDifferences:

    def test_all_kinds_sorted(self, differing_trees: Dict[str, Path]) -> None:
        findings = DirectoryComparator().compare(differing_trees["a"], differing_trees["b"])

        assert findings == [
            MissingInA(path=rel("file1.txt/inner.txt")),
            MissingInA(path="only_b"),
            MissingInB(path="only_a.txt"),
            DifferingContent(path="changed.txt"),
            TypeMismatch(path="file1.txt", type_in_a=EntryType.FILE, type_in_b=EntryType.DIRECTORY),
        ]

    def test_swapping_roots_mirrors_findings(self, differing_trees: Dict[str, Path]) -> None:
        comparator = DirectoryComparator()

        forward = comparator.compare(differing_trees["a"], differing_trees["b"])
        backward = comparator.compare(differing_trees["b"], differing_trees["a"])

        assert backward == sorted(_mirror(f) for f in forward)

    def test_missing_directory_reported_once(self, temp_dir: Path) -> None:
        """A directory missing on one side is one finding, not one per file."""
        a = build_tree(temp_dir / "a", {"file1.txt": b"0123456789", "subdir/file2.txt": b"two"})
        b = build_tree(temp_dir / "b", {"file1.txt": b"0123456789"})

        findings = DirectoryComparator().compare(a, b)

        assert findings == [MissingInB(path="subdir")]

    def test_file_in_a_directory_in_b(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"file1.txt": b"content"})
        b = build_tree(temp_dir / "b", {"file1.txt": None})

        findings = DirectoryComparator().compare(a, b)

        assert findings == [
            TypeMismatch(path="file1.txt", type_in_a=EntryType.FILE, type_in_b=EntryType.DIRECTORY)
        ]

    def test_similar_names_are_not_collapsed(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"file1": b"1", "file10": b"10"})
        b = build_tree(temp_dir / "b", {})

        findings = DirectoryComparator().compare(a, b)

        assert findings == [MissingInB(path="file1"), MissingInB(path="file10")]

    def test_differing_content_carries_modification_times(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"doc.txt": b"old"})
        b = build_tree(temp_dir / "b", {"doc.txt": b"new"})
        os.utime(a / "doc.txt", (1_600_000_000, 1_600_000_000))
        os.utime(b / "doc.txt", (1_700_000_000, 1_700_000_000))

        [finding] = DirectoryComparator().compare(a, b)

        assert isinstance(finding, DifferingContent)
        assert finding.modified_in_a == pytest.approx(1_600_000_000)
        assert finding.modified_in_b == pytest.approx(1_700_000_000)
        assert finding.newer_side == "B"

    def test_same_size_different_content(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"x.bin": b"aaaa"})
        b = build_tree(temp_dir / "b", {"x.bin": b"aaab"})

        assert DirectoryComparator().compare(a, b) == [DifferingContent(path="x.bin")]

    def test_shared_hasher_is_used(self, identical_trees: Dict[str, Path]) -> None:
        hasher = FileHasher()
        comparator = DirectoryComparator(file_hasher=hasher)

        comparator.compare(identical_trees["a"], identical_trees["b"])
        comparator.compare(identical_trees["a"], identical_trees["b"])

        stats = hasher.get_cache_stats()
        assert stats["misses"] == 6
        assert stats["hits"] == 6


class TestCompareErrors:
    """Failures become findings; the comparison always completes."""

    def test_missing_root_a(self, temp_dir: Path) -> None:
        b = build_tree(temp_dir / "b", {"x.txt": b"x"})
        missing = temp_dir / "nope"

        findings = DirectoryComparator().compare(missing, b)

        assert findings[0] == CouldNotReadDirectory(path=str(missing), message=findings[0].message)
        assert findings[1:] == [MissingInA(path="x.txt")]

    def test_hash_failure_reported_per_side(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"f.txt": b"1"})
        b = build_tree(temp_dir / "b", {"f.txt": b"2"})
        hasher = MagicMock(spec=FileHasher)

        def fail_in_a(path: str) -> str:
            if path.startswith(str(a)):
                raise HashError(path, "Input/output error")
            return "digest"

        hasher.hash_file.side_effect = fail_in_a

        findings = DirectoryComparator(file_hasher=hasher).compare(a, b)

        assert findings == [
            CouldNotCalculateHash(path=str(a / "f.txt"), message="Input/output error")
        ]

    def test_hash_failure_on_both_sides(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"f.txt": b"1"})
        b = build_tree(temp_dir / "b", {"f.txt": b"1"})
        hasher = MagicMock(spec=FileHasher)

        def fail(path: str) -> str:
            raise HashError(path, "Permission denied")

        hasher.hash_file.side_effect = fail

        findings = DirectoryComparator(file_hasher=hasher).compare(a, b)

        assert findings == [
            CouldNotCalculateHash(path=str(a / "f.txt"), message="Permission denied"),
            CouldNotCalculateHash(path=str(b / "f.txt"), message="Permission denied"),
        ]

    @pytest.mark.skipif(
        not can_restrict_permissions(),
        reason="Permission handling differs on Windows or as root",
    )
    def test_unreadable_file(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"secret.txt": b"same"})
        b = build_tree(temp_dir / "b", {"secret.txt": b"same"})
        locked = a / "secret.txt"
        os.chmod(locked, 0o000)
        try:
            findings = DirectoryComparator().compare(a, b)
        finally:
            os.chmod(locked, 0o644)

        assert len(findings) == 1
        assert isinstance(findings[0], CouldNotCalculateHash)
        assert findings[0].path == str(locked)

    @pytest.mark.skipif(
        not can_restrict_permissions(),
        reason="Permission handling differs on Windows or as root",
    )
    def test_unreadable_directory(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"locked/inner.txt": b"x"})
        b = build_tree(temp_dir / "b", {"locked/inner.txt": b"x"})
        locked = a / "locked"
        os.chmod(locked, 0o000)
        try:
            findings = DirectoryComparator().compare(a, b)
        finally:
            os.chmod(locked, 0o755)

        kinds: List[type] = [type(f) for f in findings]
        assert kinds == [CouldNotReadDirectory, MissingInA]
        assert findings[0].path == str(locked)
        assert findings[1] == MissingInA(path=rel("locked/inner.txt"))

    def test_depth_limit_applies_to_both_trees(self, temp_dir: Path) -> None:
        a = build_tree(temp_dir / "a", {"l1/l2/deep.txt": b"a"})
        b = build_tree(temp_dir / "b", {"l1/l2/deep.txt": b"b"})

        comparator = DirectoryComparator(walker=PathWalker(max_depth=1))
        findings = comparator.compare(a, b)

        assert [f.KIND for f in findings] == ["DepthExceeded", "DepthExceeded"]
        assert {f.path for f in findings} == {str(a / "l1" / "l2"), str(b / "l1" / "l2")}
