"""Tests for cleanup functionality."""

from unittest.mock import MagicMock, patch

from reclaim.cleaner import clean_items, delete_file, delete_path
from reclaim.models import CleanableItem, CleanCategory, DeleteOutcome
from reclaim.privileges import ElevatedExecutor, PrivilegeError, trash_elevated


def _item(path, category=CleanCategory.APP_CACHE, size=1000):
    return CleanableItem(path=str(path), display_name="x", size_bytes=size, category=category)


class TestDeletePath:
    def test_removes_file(self, config, home, make_file, trash):
        path = make_file(home / "Library" / "Caches" / "a.bin", 10)
        assert delete_path(str(path), config) == DeleteOutcome.REMOVED
        assert not path.exists()

    def test_refuses_outside_home(self, config, tmp_path, make_file, trash):
        path = make_file(tmp_path / "elsewhere.bin", 10)
        assert delete_path(str(path), config) == DeleteOutcome.SKIPPED_UNSAFE
        assert path.exists()
        trash.assert_not_called()

    def test_refuses_home_itself(self, config, home, trash):
        assert delete_path(str(home), config) == DeleteOutcome.SKIPPED_UNSAFE
        trash.assert_not_called()

    def test_refuses_protected(self, config, home, make_file, trash):
        path = make_file(home / "Projects" / "app.py", 10)
        config.protected_paths.append(str(home / "Projects"))
        assert delete_path(str(path), config) == DeleteOutcome.SKIPPED_UNSAFE
        assert path.exists()

    def test_missing_path(self, config, home, trash):
        assert delete_path(str(home / "gone"), config) == DeleteOutcome.SKIPPED_MISSING
        trash.assert_not_called()

    def test_vanishes_before_move(self, config, home, make_file):
        path = make_file(home / "a.bin", 10)
        with patch("reclaim.cleaner.send2trash", side_effect=FileNotFoundError(str(path))):
            assert delete_path(str(path), config) == DeleteOutcome.SKIPPED_MISSING

    def test_dry_run_moves_nothing(self, config, home, make_file, trash):
        path = make_file(home / "a.bin", 10)
        assert delete_path(str(path), config, dry_run=True) == DeleteOutcome.REMOVED
        assert path.exists()
        trash.assert_not_called()

    def test_os_error_fails(self, config, home, make_file):
        path = make_file(home / "a.bin", 10)
        with patch("reclaim.cleaner.send2trash", side_effect=OSError("busy")):
            assert delete_path(str(path), config) == DeleteOutcome.FAILED


class TestElevation:
    def test_permission_error_tries_elevation_once(self, config, home, make_file):
        path = make_file(home / "a.bin", 10)
        elevated = MagicMock(spec=ElevatedExecutor)
        elevated.trash.return_value = True
        with patch("reclaim.cleaner.send2trash", side_effect=PermissionError("denied")):
            assert delete_path(str(path), config, elevated) == DeleteOutcome.REMOVED
        elevated.trash.assert_called_once_with(str(path))

    def test_refused_elevation_fails(self, config, home, make_file):
        path = make_file(home / "a.bin", 10)
        elevated = MagicMock(spec=ElevatedExecutor)
        elevated.trash.side_effect = PrivilegeError("cancelled")
        with patch("reclaim.cleaner.send2trash", side_effect=PermissionError("denied")):
            assert delete_path(str(path), config, elevated) == DeleteOutcome.FAILED

    def test_no_executor_fails(self, config, home, make_file):
        path = make_file(home / "a.bin", 10)
        with patch("reclaim.cleaner.send2trash", side_effect=PermissionError("denied")):
            assert delete_path(str(path), config) == DeleteOutcome.FAILED

    def test_protocol_check(self):
        class Helper:
            def trash(self, path):
                return True

        assert isinstance(Helper(), ElevatedExecutor)


class TestDeleteFile:
    def test_true_when_removed(self, config, home, make_file, trash):
        assert delete_file(str(make_file(home / "a.bin", 10)), config)

    def test_false_when_missing(self, config, home, trash):
        assert not delete_file(str(home / "missing"), config)

    def test_unexpected_elevation_error_absorbed(self, config, home, make_file):
        path = make_file(home / "a.bin", 10)
        elevated = MagicMock(spec=ElevatedExecutor)
        elevated.trash.side_effect = RuntimeError("helper protocol error")
        with patch("reclaim.cleaner.send2trash", side_effect=PermissionError("denied")):
            assert delete_file(str(path), config, elevated) is False
        assert path.exists()


class TestCleanItems:
    def test_empty(self, config):
        result = clean_items([], config)
        assert result.items_requested == 0
        assert result.bytes_freed == 0

    def test_totals(self, config, home, make_file, trash):
        items = [_item(make_file(home / f"f{i}.bin", 10), size=100) for i in range(3)]
        result = clean_items(items, config)
        assert result.items_removed == 3
        assert result.items_requested == 3
        assert result.bytes_freed == 300

    def test_same_path_deleted_once(self, config, home, make_file, trash):
        path = make_file(home / "Library" / "Caches" / "shared.bin", 10)
        items = [
            _item(path, CleanCategory.APP_CACHE, 500),
            _item(path, CleanCategory.BROWSER_CACHE, 500),
        ]
        result = clean_items(items, config)
        assert trash.call_count == 1
        assert result.items_removed == 1
        assert result.bytes_freed == 500

    def test_equivalent_spellings_deleted_once(self, config, home, make_file, trash):
        path = make_file(home / "Library" / "shared.bin", 10)
        spelled = f"{home}/Library/./shared.bin"
        result = clean_items([_item(path), _item(spelled)], config)
        assert trash.call_count == 1
        assert result.items_removed == 1

    def test_failures_excluded_from_totals(self, config, home, make_file, trash):
        good = make_file(home / "good.bin", 10)
        items = [
            _item(good, size=100),
            _item(home / "missing.bin", size=200),
            _item(home.parent / "outside.bin", size=400),
        ]
        result = clean_items(items, config)
        assert result.items_requested == 3
        assert result.items_removed == 1
        assert result.bytes_freed == 100

    def test_unexpected_error_does_not_abort(self, config, home, make_file):
        paths = [make_file(home / f"f{i}.bin", 10) for i in range(3)]

        def flaky(path):
            if path.endswith("f1.bin"):
                raise RuntimeError("boom")

        with patch("reclaim.cleaner.send2trash", side_effect=flaky):
            result = clean_items([_item(p) for p in paths], config)
        assert result.items_removed == 2

    def test_progress_throttled(self, config, home, make_file, trash):
        config.progress_every = 5
        config.max_workers = 1
        items = [_item(make_file(home / f"f{i}.bin", 10)) for i in range(12)]
        fractions = []
        clean_items(items, config, lambda fraction, path: fractions.append(fraction))
        assert fractions == [5 / 12, 10 / 12, 1.0]

    def test_progress_in_order_with_workers(self, config, home, make_file, trash):
        config.progress_every = 1
        config.max_workers = 4
        items = [_item(make_file(home / f"f{i}.bin", 10)) for i in range(40)]
        fractions = []
        clean_items(items, config, lambda fraction, path: fractions.append(fraction))
        assert fractions == sorted(fractions)
        assert len(fractions) == 40
        assert fractions[-1] == 1.0

    def test_dry_run(self, config, home, make_file, trash):
        path = make_file(home / "a.bin", 10)
        result = clean_items([_item(path, size=100)], config, dry_run=True)
        assert result.dry_run
        assert result.bytes_freed == 100
        assert path.exists()
        trash.assert_not_called()


class TestTrashElevated:
    def test_no_executor(self):
        assert trash_elevated(None, "/x") is False

    def test_os_error_absorbed(self):
        elevated = MagicMock(spec=ElevatedExecutor)
        elevated.trash.side_effect = OSError("helper crashed")
        assert trash_elevated(elevated, "/x") is False

    def test_success(self):
        elevated = MagicMock(spec=ElevatedExecutor)
        elevated.trash.return_value = True
        assert trash_elevated(elevated, "/x") is True
