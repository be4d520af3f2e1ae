"""Tests for DirscopeSession."""

import os
import threading
from pathlib import Path
from typing import Dict, List
from unittest.mock import patch

import pytest

from conftest import build_tree, rel
from dirscope.models import DirEntry, ErrorEntry, ErrorKind, MissingInA, ProgressPayload
from dirscope.orchestration import DEFAULT_VIEW_DEPTH, DirscopeSession


class TestSessionCompare:

    def test_compare_delegates(self, differing_trees: Dict[str, Path]) -> None:
        session = DirscopeSession()

        findings = session.compare(str(differing_trees["a"]), str(differing_trees["b"]))

        assert MissingInA(path="only_b") in findings
        assert findings == sorted(findings)


class TestSessionAnalyze:

    def test_result_is_flattened_to_view_depth(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession(view_depth=1)

        analysis = session.analyze_disk_usage(str(usage_tree_dir))

        photos = next(c for c in analysis.result.content if c.path == "photos")
        assert photos.content == ()
        assert photos.size == 600
        assert analysis.duration_ms >= 0

    def test_full_tree_is_cached(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession(view_depth=1)
        session.analyze_disk_usage(str(usage_tree_dir))

        cached = session.cache.get()
        assert isinstance(cached, DirEntry)
        assert cached.depth() == 3

    def test_default_view_depth(self) -> None:
        assert DEFAULT_VIEW_DEPTH == 2
        assert DirscopeSession().view_depth == 2

    def test_negative_view_depth_rejected(self) -> None:
        with pytest.raises(ValueError):
            DirscopeSession(view_depth=-1)

    def test_progress_callback_receives_payloads(self, usage_tree_dir: Path) -> None:
        seen: List[ProgressPayload] = []

        DirscopeSession().analyze_disk_usage(str(usage_tree_dir), on_progress=seen.append)

        assert seen
        assert seen[0].path == str(usage_tree_dir)

    def test_duration_in_milliseconds(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession()
        with patch.object(session._analyzer, "analyze", return_value=(DirEntry.from_children("", []), 1.2345)):
            analysis = session.analyze_disk_usage(str(usage_tree_dir))

        assert analysis.duration_ms == 1234


class TestSessionSubtree:

    def test_get_subtree_before_analysis(self) -> None:
        assert DirscopeSession().get_subtree("photos") is None

    def test_get_subtree_after_analysis(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession(view_depth=1)
        session.analyze_disk_usage(str(usage_tree_dir))

        subtree = session.get_subtree(rel("photos/2024"))

        assert subtree.size == 500
        raw = next(c for c in subtree.content if c.path == rel("photos/2024/raw"))
        assert raw.content == ()
        assert raw.number_of_files == 1

    def test_get_subtree_normalizes_path(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession()
        session.analyze_disk_usage(str(usage_tree_dir))

        assert session.get_subtree(".").size == 610
        assert session.get_subtree("photos" + os.sep).path == "photos"

    def test_deep_tree_with_large_max_depth(self, temp_dir: Path) -> None:
        deep = "/".join(["d"] * 600)
        root = build_tree(temp_dir / "deep", {f"{deep}/leaf.txt": b"x"})
        session = DirscopeSession(max_depth=1000)

        analysis = session.analyze_disk_usage(str(root))

        assert not analysis.aborted
        assert analysis.result.number_of_files == 1
        assert session.get_subtree(rel(deep)).number_of_files == 1

    def test_unknown_subtree(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession()
        session.analyze_disk_usage(str(usage_tree_dir))

        assert session.get_subtree("nope") is None

    def test_new_analysis_replaces_cache(self, usage_tree_dir: Path, temp_dir: Path) -> None:
        other = temp_dir / "other"
        other.mkdir()
        session = DirscopeSession()

        session.analyze_disk_usage(str(usage_tree_dir))
        session.analyze_disk_usage(str(other))

        assert session.get_subtree("photos") is None
        assert session.get_subtree("") == DirEntry(path="", size=0, number_of_files=0)


class TestSessionAbort:

    def test_abort_when_idle_is_noop(self) -> None:
        session = DirscopeSession()

        session.abort_current_analysis()

    def test_abort_from_another_thread(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession(progress_interval=0)
        started = threading.Event()
        release = threading.Event()

        def on_progress(payload: ProgressPayload) -> None:
            started.set()
            release.wait(timeout=5)

        results = []
        worker = threading.Thread(
            target=lambda: results.append(session.analyze_disk_usage(str(usage_tree_dir), on_progress))
        )
        worker.start()
        assert started.wait(timeout=5)

        session.abort_current_analysis()
        release.set()
        worker.join(timeout=5)

        [analysis] = results
        assert analysis.aborted
        assert analysis.result == ErrorEntry(path=None, reason="Aborted", kind=ErrorKind.ABORTED)

    def test_aborted_analysis_keeps_previous_cache(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession(progress_interval=0)
        session.analyze_disk_usage(str(usage_tree_dir))
        previous = session.cache.get()

        def abort_on_progress(payload: ProgressPayload) -> None:
            session.abort_current_analysis()

        analysis = session.analyze_disk_usage(str(usage_tree_dir), on_progress=abort_on_progress)

        assert analysis.aborted
        assert session.cache.get() is previous

    def test_abort_does_not_leak_into_next_analysis(self, usage_tree_dir: Path) -> None:
        session = DirscopeSession(progress_interval=0)

        def abort_on_progress(payload: ProgressPayload) -> None:
            session.abort_current_analysis()

        assert session.analyze_disk_usage(str(usage_tree_dir), abort_on_progress).aborted
        assert not session.analyze_disk_usage(str(usage_tree_dir)).aborted


class TestSessionCopy:

    def test_apply_copy(self, differing_trees: Dict[str, Path]) -> None:
        a, b = differing_trees["a"], differing_trees["b"]

        errors = DirscopeSession().apply_copy(str(a), str(b), ["only_a.txt", "changed.txt"])

        assert errors == []
        assert (b / "only_a.txt").read_bytes() == b"a only"
        assert (b / "changed.txt").read_bytes() == b"version one"

    def test_apply_copy_dry_run(self, differing_trees: Dict[str, Path]) -> None:
        a, b = differing_trees["a"], differing_trees["b"]

        errors = DirscopeSession().apply_copy(str(a), str(b), ["only_a.txt"], dry_run=True)

        assert errors == []
        assert not (b / "only_a.txt").exists()
