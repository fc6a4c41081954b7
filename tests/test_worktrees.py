"""Tests for the worktree service flows, with git mocked out."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from spawn_worktree.config import SpawnConfig
from spawn_worktree.exceptions import NotAGitRepositoryError, ValidationError
from spawn_worktree.models import WorktreeRecord
from spawn_worktree.worktrees import WorktreeService, open_repository, worktree_status

PORCELAIN = (
    "worktree /code/app\n"
    "HEAD aaa\n"
    "branch refs/heads/main\n"
    "\n"
    "worktree /code/app-topic\n"
    "HEAD bbb\n"
    "branch refs/heads/topic\n"
    "\n"
)
BRANCHES = "* main\n  topic\n  orphan\n  remotes/origin/main\n"


def _service(root: Path = Path("/code/app"), config: SpawnConfig | None = None) -> WorktreeService:
    return WorktreeService(repo_root=root, config=config or SpawnConfig(), console=Console(quiet=True))


class OpenRepositoryTests(unittest.TestCase):
    @mock.patch("spawn_worktree.worktrees.git.is_git_repository", return_value=False)
    def test_outside_repository(self, _is_repo: mock.Mock) -> None:
        with self.assertRaisesRegex(NotAGitRepositoryError, "Not in a git repository"):
            open_repository()

    @mock.patch("spawn_worktree.worktrees.git.git_root_directory", return_value=Path("/code/app"))
    @mock.patch("spawn_worktree.worktrees.git.is_git_repository", return_value=True)
    def test_returns_root(self, _is_repo: mock.Mock, _root: mock.Mock) -> None:
        self.assertEqual(open_repository(), Path("/code/app"))


@mock.patch("spawn_worktree.worktrees.git.branch_listing", return_value=BRANCHES)
@mock.patch("spawn_worktree.worktrees.git.worktree_porcelain", return_value=PORCELAIN)
class ServiceQueryTests(unittest.TestCase):
    def test_list_worktrees(self, _porcelain: mock.Mock, _branches: mock.Mock) -> None:
        records = _service().list_worktrees()

        self.assertEqual([r.short_branch for r in records], ["main", "topic"])

    def test_list_branches(self, _porcelain: mock.Mock, _branches: mock.Mock) -> None:
        self.assertEqual(_service().list_branches(), ["main", "topic", "orphan"])

    def test_is_current(self, _porcelain: mock.Mock, _branches: mock.Mock) -> None:
        service = _service()
        main, topic = service.list_worktrees()

        self.assertTrue(service.is_current(main))
        self.assertFalse(service.is_current(topic))


class TargetPathTests(unittest.TestCase):
    def test_defaults_to_sibling_of_repo(self) -> None:
        self.assertEqual(_service().target_path("topic"), Path("/code/app-topic"))

    def test_configured_root(self) -> None:
        service = _service(config=SpawnConfig(worktree_root=Path("/worktrees")))

        self.assertEqual(service.target_path("topic"), Path("/worktrees/app-topic"))

    def test_slashes_are_flattened(self) -> None:
        target = _service().target_path("feature/login")

        self.assertEqual(target, Path("/code/app-feature-login"))
        self.assertEqual(target.parent, Path("/code"))


class CreateWorktreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name) / "app"
        self.root.mkdir()
        self.service = _service(self.root)

    @mock.patch("spawn_worktree.worktrees.git.worktree_add")
    @mock.patch("spawn_worktree.worktrees.git.remote_branch_exists", return_value=False)
    @mock.patch("spawn_worktree.worktrees.git.local_branch_exists", return_value=False)
    def test_new_branch(self, _local: mock.Mock, _remote: mock.Mock, add: mock.Mock) -> None:
        target = self.service.create_worktree("feature/login")

        self.assertEqual(target, self.root.parent / "app-feature-login")
        add.assert_called_once_with(self.root, target, "feature/login", create_branch=True)

    @mock.patch("spawn_worktree.worktrees.git.worktree_add")
    @mock.patch("spawn_worktree.worktrees.git.local_branch_exists", return_value=True)
    def test_existing_local_branch(self, _local: mock.Mock, add: mock.Mock) -> None:
        target = self.service.create_worktree("topic")

        add.assert_called_once_with(self.root, target, "topic", create_branch=False)

    @mock.patch("spawn_worktree.worktrees.git.worktree_add")
    @mock.patch("spawn_worktree.worktrees.git.remote_branch_exists", return_value=True)
    @mock.patch("spawn_worktree.worktrees.git.local_branch_exists", return_value=False)
    def test_remote_only_branch(self, _local: mock.Mock, _remote: mock.Mock, add: mock.Mock) -> None:
        target = self.service.create_worktree("topic")

        add.assert_called_once_with(self.root, target, "topic", create_branch=True, start_point="origin/topic")

    @mock.patch("spawn_worktree.worktrees.git.worktree_add")
    def test_invalid_name_never_reaches_git(self, add: mock.Mock) -> None:
        with self.assertRaisesRegex(ValidationError, "invalid characters"):
            self.service.create_worktree("bad name")
        add.assert_not_called()

    @mock.patch("spawn_worktree.worktrees.git.worktree_add")
    def test_existing_path_requires_overwrite(self, add: mock.Mock) -> None:
        (self.root.parent / "app-topic").mkdir()

        with self.assertRaisesRegex(ValidationError, "already exists"):
            self.service.create_worktree("topic")
        add.assert_not_called()

    @mock.patch("spawn_worktree.worktrees.git.worktree_add")
    @mock.patch("spawn_worktree.worktrees.git.local_branch_exists", return_value=True)
    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_overwrite_removes_existing(self, remove: mock.Mock, _local: mock.Mock, add: mock.Mock) -> None:
        existing = self.root.parent / "app-topic"
        existing.mkdir()

        self.service.create_worktree("topic", overwrite=True)

        remove.assert_called_once_with(existing, cwd=self.root, force=True)
        add.assert_called_once()


@mock.patch("spawn_worktree.worktrees.git.branch_listing", return_value=BRANCHES)
@mock.patch("spawn_worktree.worktrees.git.worktree_porcelain", return_value=PORCELAIN)
class RemoveBranchTests(unittest.TestCase):
    @mock.patch("spawn_worktree.worktrees.git.delete_branch")
    @mock.patch("spawn_worktree.worktrees.confirm", return_value=True)
    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_removes_worktree_then_branch(
        self, remove: mock.Mock, confirm: mock.Mock, delete: mock.Mock, *_git: mock.Mock
    ) -> None:
        removed = _service().remove_branch("topic")

        self.assertEqual(removed.path, "/code/app-topic")
        remove.assert_called_once_with("/code/app-topic", cwd=Path("/code/app"), force=True)
        confirm.assert_called_once()
        delete.assert_called_once_with("topic", cwd=Path("/code/app"))

    @mock.patch("spawn_worktree.worktrees.git.delete_branch")
    @mock.patch("spawn_worktree.worktrees.confirm", return_value=False)
    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_keeps_branch_when_declined(
        self, remove: mock.Mock, _confirm: mock.Mock, delete: mock.Mock, *_git: mock.Mock
    ) -> None:
        _service().remove_branch("topic")

        remove.assert_called_once()
        delete.assert_not_called()

    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_refuses_current_worktree(self, remove: mock.Mock, *_git: mock.Mock) -> None:
        with self.assertRaisesRegex(ValidationError, "current worktree"):
            _service().remove_branch("main")
        remove.assert_not_called()

    @mock.patch("spawn_worktree.worktrees.git.delete_branch")
    @mock.patch("spawn_worktree.worktrees.confirm", return_value=True)
    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_branch_without_worktree(
        self, remove: mock.Mock, _confirm: mock.Mock, delete: mock.Mock, *_git: mock.Mock
    ) -> None:
        self.assertIsNone(_service().remove_branch("orphan"))

        remove.assert_not_called()
        delete.assert_called_once_with("orphan", cwd=Path("/code/app"))

    @mock.patch("spawn_worktree.worktrees.confirm")
    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_unknown_branch_is_a_no_op(self, remove: mock.Mock, confirm: mock.Mock, *_git: mock.Mock) -> None:
        self.assertIsNone(_service().remove_branch("ghost"))

        remove.assert_not_called()
        confirm.assert_not_called()


class RemoveWorktreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.parent = Path(self._tmp.name)
        self.root = self.parent / "app"
        self.root.mkdir()
        self.service = _service(self.root)

    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_nested_worktree_leaves_no_empty_parents(self, remove: mock.Mock) -> None:
        leaf = self.parent / "app-feature" / "login"
        leaf.mkdir(parents=True)
        remove.side_effect = lambda path, **_kwargs: Path(path).rmdir()

        self.service.remove_worktree(WorktreeRecord(path=str(leaf), branch="refs/heads/feature/login"))

        self.assertFalse((self.parent / "app-feature").exists())
        self.assertTrue(self.parent.exists())
        self.assertTrue(self.root.exists())

    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_non_empty_parent_is_kept(self, remove: mock.Mock) -> None:
        leaf = self.parent / "app-feature" / "login"
        leaf.mkdir(parents=True)
        (self.parent / "app-feature" / "notes.txt").write_text("keep")
        remove.side_effect = lambda path, **_kwargs: Path(path).rmdir()

        self.service.remove_worktree(WorktreeRecord(path=str(leaf), branch="refs/heads/feature/login"))

        self.assertFalse(leaf.exists())
        self.assertTrue((self.parent / "app-feature" / "notes.txt").exists())

    @mock.patch("spawn_worktree.worktrees.git.worktree_remove")
    def test_paths_outside_worktree_parent_are_untouched(self, remove: mock.Mock) -> None:
        with tempfile.TemporaryDirectory() as elsewhere:
            leaf = Path(elsewhere) / "nested" / "wt"
            leaf.mkdir(parents=True)

            self.service.remove_worktree(WorktreeRecord(path=str(leaf), is_detached=True))

            remove.assert_called_once_with(str(leaf), cwd=self.root, force=True)
            self.assertTrue(leaf.exists())


class WorktreeStatusTests(unittest.TestCase):
    def test_statuses(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(worktree_status(WorktreeRecord(path=tmp)), "active")
            self.assertEqual(worktree_status(WorktreeRecord(path=tmp, is_prunable=True)), "prunable")
            self.assertEqual(worktree_status(WorktreeRecord(path=tmp, is_bare=True)), "bare")
        self.assertEqual(worktree_status(WorktreeRecord(path="/definitely/not/here")), "missing")


if __name__ == "__main__":
    unittest.main()
