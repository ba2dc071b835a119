"""Tests for orphan detection and batch removal in the reconciler."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from fakes import FakeGit
from gwt.config import GwtConfig
from gwt.exceptions import NoDefaultBranch, PartialBatchFailure
from gwt.models import BranchRef
from gwt.prune import Reconciler, orphan_reason
from gwt.worktrees import WorktreeManager


class ReconcilerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        tmp = Path(self._tmp.name)
        self.git = FakeGit(tmp / "src" / "widget", url="https://github.com/acme/widget.git")
        self.manager = WorktreeManager(GwtConfig(root=tmp / "r"), self.git)
        self.base = tmp / "r" / "github.com" / "acme" / "widget"
        self.reconciler = Reconciler(self.manager)
        self.prompted: list[list[str]] = []

    def accept(self, candidates) -> bool:
        self.prompted.append([candidate.branch for candidate in candidates])
        return True

    def decline(self, candidates) -> bool:
        self.prompted.append([candidate.branch for candidate in candidates])
        return False

    def worktree(self, branch: str, *, merged: bool = False, upstream: bool = False, on_remote: bool = False) -> Path:
        path = self.base / branch
        self.git.bind(path, branch)
        if merged:
            self.git.merged.add(branch)
        if upstream:
            self.git.upstreams[branch] = f"origin/{branch}"
        if on_remote:
            self.git.remote_branches.add(branch)
        return path


class FindCandidatesTests(ReconcilerTestCase):
    def test_scenario_from_mixed_worktrees(self) -> None:
        self.worktree("old-feature", merged=True, upstream=True, on_remote=True)
        self.worktree("wip", upstream=True)
        self.worktree("local-only")
        self.worktree("active", upstream=True, on_remote=True)

        candidates = self.reconciler.find_candidates("main")

        self.assertEqual({candidate.branch for candidate in candidates}, {"old-feature", "wip"})
        reasons = {candidate.branch: candidate.reason for candidate in candidates}
        self.assertEqual(reasons["old-feature"], "merged into main")
        self.assertEqual(reasons["wip"], "remote branch deleted")

    def test_default_branch_is_never_a_candidate(self) -> None:
        # merged_branches always reports the target itself as merged.
        self.git.worktrees[0].branch = "trunk"
        self.git.local = {"trunk"}
        self.git.remote_default = "trunk"
        self.worktree("feature", merged=True)

        default = self.reconciler.resolve_default_branch()
        self.assertEqual(default, "trunk")
        candidates = self.reconciler.find_candidates(default)
        self.assertEqual([candidate.branch for candidate in candidates], ["feature"])

    def test_both_conditions_count_once(self) -> None:
        self.worktree("done", merged=True, upstream=True)
        candidates = self.reconciler.find_candidates("main")
        self.assertEqual([candidate.branch for candidate in candidates], ["done"])
        self.assertEqual(candidates[0].reason, "merged into main")

    def test_primary_checkout_on_merged_branch_is_kept(self) -> None:
        self.git.worktrees[0].branch = "feature"
        self.git.local.add("feature")
        self.git.merged.add("feature")
        self.assertEqual(self.reconciler.find_candidates("main"), [])

    def test_bare_entries_are_ignored(self) -> None:
        path = self.worktree("bare", merged=True)
        self.git.worktrees[-1].is_bare = True
        self.assertEqual(self.reconciler.find_candidates("main"), [])
        self.assertTrue(path.exists())

    def test_detached_worktrees_are_ignored(self) -> None:
        path = self.worktree("temp", merged=True)
        self.git.worktrees[-1].branch = None
        self.assertEqual(self.reconciler.find_candidates("main"), [])
        self.assertTrue(path.exists())


class OrphanReasonTests(unittest.TestCase):
    def test_never_tracked_branch_is_kept(self) -> None:
        ref = BranchRef(name="spike", exists_locally=True, exists_on_remote=False)
        self.assertIsNone(orphan_reason(ref, "main"))

    def test_upstream_gone(self) -> None:
        ref = BranchRef(name="wip", exists_locally=True, exists_on_remote=False, tracking_ref="origin/wip")
        self.assertEqual(orphan_reason(ref, "main"), "remote branch deleted")

    def test_still_on_remote_and_unmerged(self) -> None:
        ref = BranchRef(name="wip", exists_locally=True, exists_on_remote=True, tracking_ref="origin/wip")
        self.assertIsNone(orphan_reason(ref, "main"))


class ResolveDefaultBranchTests(ReconcilerTestCase):
    def test_prefers_local_main_then_master(self) -> None:
        self.git.local.add("master")
        self.assertEqual(self.reconciler.resolve_default_branch(), "main")
        self.git.local.discard("main")
        self.assertEqual(self.reconciler.resolve_default_branch(), "master")

    def test_no_default_branch(self) -> None:
        self.git.local.clear()
        with self.assertRaises(NoDefaultBranch):
            self.reconciler.resolve_default_branch()


class ReconcileTests(ReconcilerTestCase):
    def test_removes_confirmed_candidates(self) -> None:
        old = self.worktree("old-feature", merged=True)
        keep = self.worktree("local-only")

        summary = self.reconciler.reconcile(self.accept)

        self.assertEqual(self.git.calls[0], ("fetch", True))
        self.assertEqual(self.prompted, [["old-feature"]])
        self.assertEqual(summary.removed, 1)
        self.assertEqual(summary.default_branch, "main")
        self.assertFalse(old.exists())
        self.assertTrue(keep.exists())

    def test_declined_confirmation_removes_nothing(self) -> None:
        old = self.worktree("old-feature", merged=True)
        summary = self.reconciler.reconcile(self.decline)

        self.assertTrue(summary.cancelled)
        self.assertEqual(summary.removed, 0)
        self.assertTrue(old.exists())

    def test_no_candidates_skips_confirmation(self) -> None:
        self.worktree("local-only")
        summary = self.reconciler.reconcile(self.accept)
        self.assertEqual(self.prompted, [])
        self.assertEqual(summary.removed, 0)

    def test_single_failure_does_not_stop_the_batch(self) -> None:
        self.worktree("a", merged=True)
        failing = self.worktree("b", merged=True)
        self.worktree("c", merged=True)
        self.git.failing_removals.add(failing)

        summary = self.reconciler.reconcile(self.accept)

        self.assertEqual(summary.removed, 2)
        self.assertEqual(summary.failures, ["b"])
        self.assertTrue(failing.exists())
        with self.assertRaises(PartialBatchFailure) as ctx:
            summary.raise_for_failures()
        self.assertEqual(ctx.exception.removed, 2)
        self.assertEqual(ctx.exception.count, 1)

    def test_primary_checkout_never_reaches_confirmation(self) -> None:
        self.git.worktrees[0].branch = "feature"
        self.git.merged.add("feature")
        summary = self.reconciler.reconcile(self.accept)
        self.assertEqual(self.prompted, [])
        self.assertEqual(summary.failures, [])

    def test_missing_directory_is_skipped(self) -> None:
        self.git.bind(self.base / "vanished", "vanished", create=False)
        self.git.merged.add("vanished")
        summary = self.reconciler.reconcile(self.accept)
        self.assertEqual(summary.removed, 0)
        self.assertEqual(summary.failures, [])


if __name__ == "__main__":
    unittest.main()
