"""Tests for action execution."""

import pytest

from hbackup.core.execution import (
    ActionError,
    apply,
    apply_async,
    execute_worklist,
)
from hbackup.core.models import Copy, Delete, Skip


class TestApply:
    """Tests for the synchronous apply function."""

    def test_copy_creates_parents(self, tmp_path):
        """Test that Copy creates missing destination directories."""
        src = tmp_path / "a.txt"
        src.write_text("hello")
        dest = tmp_path / "out" / "deep" / "a.txt"

        apply(Copy(src, dest))

        assert dest.read_text() == "hello"

    def test_copy_preserves_mtime(self, tmp_path):
        """Test that copies keep the source modification time."""
        src = tmp_path / "a.txt"
        src.write_text("hello")
        dest = tmp_path / "b.txt"

        apply(Copy(src, dest))

        assert abs(src.stat().st_mtime - dest.stat().st_mtime) < 1.0

    def test_copy_overwrites(self, tmp_path):
        """Test that Copy replaces an existing destination."""
        src = tmp_path / "a.txt"
        src.write_text("new")
        dest = tmp_path / "b.txt"
        dest.write_text("old and longer")

        apply(Copy(src, dest))

        assert dest.read_text() == "new"

    def test_copy_missing_source(self, tmp_path):
        """Test that a failing copy is reported as ActionError."""
        action = Copy(tmp_path / "missing", tmp_path / "dest")
        with pytest.raises(ActionError) as exc_info:
            apply(action)
        assert exc_info.value.action == action
        assert isinstance(exc_info.value.cause, FileNotFoundError)
        assert "failed" in str(exc_info.value)

    def test_copy_replaces_directory(self, tmp_path):
        """Test that Copy onto an existing directory leaves a file at dest."""
        src = tmp_path / "x"
        src.write_text("now a file")
        dest = tmp_path / "out" / "x"
        (dest / "sub").mkdir(parents=True)
        (dest / "sub" / "inner.txt").write_text("old")

        apply(Copy(src, dest))

        assert dest.is_file()
        assert dest.read_text() == "now a file"

    def test_delete_file(self, tmp_path):
        """Test that Delete removes a file."""
        path = tmp_path / "a.txt"
        path.write_text("x")
        apply(Delete(path))
        assert not path.exists()

    def test_delete_directory(self, tmp_path):
        """Test that Delete removes a directory recursively."""
        path = tmp_path / "dir"
        (path / "sub").mkdir(parents=True)
        (path / "sub" / "f.txt").write_text("x")
        apply(Delete(path))
        assert not path.exists()

    def test_delete_missing_is_noop(self, tmp_path):
        """Test that deleting a path that is already gone succeeds."""
        apply(Delete(tmp_path / "missing"))

    def test_delete_below_file_fails(self, tmp_path):
        """Test that a Delete failing with another OSError is an ActionError."""
        path = tmp_path / "a.txt"
        path.write_text("x")
        action = Delete(path / "child")

        with pytest.raises(ActionError) as exc_info:
            apply(action)

        assert exc_info.value.action == action
        assert isinstance(exc_info.value.cause, NotADirectoryError)
        assert path.read_text() == "x"

    def test_skip_has_no_effect(self, tmp_path):
        """Test that Skip touches nothing."""
        src = tmp_path / "a.txt"
        dest = tmp_path / "b.txt"
        apply(Skip(src, dest))
        assert not dest.exists()

    def test_unknown_action(self):
        """Test that unknown action types are rejected."""
        with pytest.raises(TypeError):
            apply("copy everything")


class TestApplyAsync:
    """Tests for apply_async."""

    @pytest.mark.asyncio
    async def test_copy(self, tmp_path):
        """Test that apply_async performs the copy."""
        src = tmp_path / "a.txt"
        src.write_text("async")
        dest = tmp_path / "out" / "a.txt"

        await apply_async(Copy(src, dest))

        assert dest.read_text() == "async"

    @pytest.mark.asyncio
    async def test_error_propagates(self, tmp_path):
        """Test that failures surface as ActionError."""
        with pytest.raises(ActionError):
            await apply_async(Copy(tmp_path / "missing", tmp_path / "dest"))


class TestExecuteWorklist:
    """Tests for execute_worklist."""

    @pytest.mark.asyncio
    async def test_empty(self):
        """Test that an empty worklist does nothing."""
        assert await execute_worklist([]) == []

    @pytest.mark.asyncio
    async def test_applies_all_actions(self, tmp_path):
        """Test that every action is applied."""
        srcs = []
        for i in range(20):
            src = tmp_path / "src" / f"f{i}.txt"
            src.parent.mkdir(exist_ok=True)
            src.write_text(str(i))
            srcs.append(src)
        stale = tmp_path / "dest" / "stale.txt"
        stale.parent.mkdir()
        stale.write_text("stale")
        actions = [Copy(s, tmp_path / "dest" / s.name) for s in srcs]
        actions.append(Delete(stale))

        failures = await execute_worklist(actions, max_workers=4)

        assert failures == []
        for i in range(20):
            assert (tmp_path / "dest" / f"f{i}.txt").read_text() == str(i)
        assert not stale.exists()

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_siblings(self, tmp_path):
        """Test that one failing action leaves the others to complete."""
        good = tmp_path / "good.txt"
        good.write_text("ok")
        bad = Copy(tmp_path / "missing.txt", tmp_path / "dest" / "missing.txt")
        actions = [
            Copy(good, tmp_path / "dest" / "one.txt"),
            bad,
            Copy(good, tmp_path / "dest" / "two.txt"),
        ]

        failures = await execute_worklist(actions, max_workers=1)

        assert len(failures) == 1
        assert failures[0].action == bad
        assert (tmp_path / "dest" / "one.txt").read_text() == "ok"
        assert (tmp_path / "dest" / "two.txt").read_text() == "ok"

    @pytest.mark.asyncio
    async def test_zero_workers_still_runs(self, tmp_path):
        """Test that a non-positive pool size falls back to one worker."""
        src = tmp_path / "a.txt"
        src.write_text("x")
        failures = await execute_worklist([Copy(src, tmp_path / "b.txt")], 0)
        assert failures == []
        assert (tmp_path / "b.txt").exists()

    @pytest.mark.asyncio
    async def test_failed_delete_is_collected(self, tmp_path):
        """Test that a failing Delete is collected while siblings complete."""
        blocker = tmp_path / "blocker.txt"
        blocker.write_text("x")
        good = tmp_path / "good.txt"
        good.write_text("ok")
        stale = tmp_path / "stale.txt"
        stale.write_text("stale")
        bad = Delete(blocker / "child")
        actions = [Copy(good, tmp_path / "dest" / "one.txt"), bad, Delete(stale)]

        failures = await execute_worklist(actions, max_workers=2)

        assert len(failures) == 1
        assert failures[0].action == bad
        assert isinstance(failures[0].cause, NotADirectoryError)
        assert (tmp_path / "dest" / "one.txt").read_text() == "ok"
        assert not stale.exists()
