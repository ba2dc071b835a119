"""Tests for configuration loading and worktree path resolution."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from gwt.config import load_config
from gwt.exceptions import ConfigError
from gwt.fs import base_path, cleanup_empty_dirs, worktree_path
from gwt.models import ProjectIdentity


WIDGET = ProjectIdentity("github.com", "acme", "widget")


class LoadConfigTests(unittest.TestCase):
    def test_missing_root_is_a_config_error(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            load_config(environ={})
        self.assertIn("GWT_ROOT_DIR", str(ctx.exception))

    def test_blank_root_is_a_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(environ={"GWT_ROOT_DIR": "  "})

    def test_tilde_is_expanded(self) -> None:
        config = load_config(environ={"GWT_ROOT_DIR": "~/worktrees"})
        self.assertEqual(config.root, Path.home() / "worktrees")
        self.assertFalse(config.debug)

    def test_override_wins_and_debug_flag_is_read(self) -> None:
        config = load_config("/override", environ={"GWT_ROOT_DIR": "/env", "GWT_DEBUG": "true"})
        self.assertEqual(config.root, Path("/override"))
        self.assertTrue(config.debug)


class PathResolverTests(unittest.TestCase):
    def test_worktree_path_layout(self) -> None:
        self.assertEqual(
            worktree_path("/r", WIDGET, "feature/x"),
            Path("/r/github.com/acme/widget/feature/x"),
        )
        self.assertEqual(base_path("/r", WIDGET), Path("/r/github.com/acme/widget"))

    def test_local_identity_skips_empty_owner(self) -> None:
        identity = ProjectIdentity("local", "", "widget")
        self.assertEqual(base_path("/r", identity), Path("/r/local/widget"))

    def test_paths_are_pure_and_distinct_per_branch(self) -> None:
        first = worktree_path("/r", WIDGET, "feature/x")
        self.assertEqual(first, worktree_path("/r", WIDGET, "feature/x"))
        branches = ["main", "feature/x", "feature/y", "fix-1"]
        paths = {worktree_path("/r", WIDGET, branch) for branch in branches}
        self.assertEqual(len(paths), len(branches))

    def test_home_expansion(self) -> None:
        self.assertEqual(base_path("~/wt", WIDGET), Path.home() / "wt/github.com/acme/widget")

    def test_empty_root_raises(self) -> None:
        with self.assertRaises(ConfigError):
            worktree_path("", WIDGET, "main")


class CleanupEmptyDirsTests(unittest.TestCase):
    def test_removes_empty_parents_up_to_stop(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp) / "base"
            nested = base / "feature" / "deep"
            nested.mkdir(parents=True)
            (base / "keep").mkdir()
            cleanup_empty_dirs(nested / "gone", stop=base)
            self.assertFalse((base / "feature").exists())
            self.assertTrue(base.exists())
            self.assertTrue((base / "keep").exists())

    def test_stops_at_non_empty_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp) / "base"
            (base / "feature" / "x").mkdir(parents=True)
            (base / "feature" / "y").mkdir()
            cleanup_empty_dirs(base / "feature" / "x", stop=base)
            self.assertFalse((base / "feature" / "x").exists())
            self.assertTrue((base / "feature" / "y").exists())


if __name__ == "__main__":
    unittest.main()
