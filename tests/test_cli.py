"""Tests for CLI interface."""

import json

import pytest
from typer.testing import CliRunner

from reclaim.categories import KB, MB
from reclaim.cli import app
from reclaim.config import CONFIG_ENV_VAR, load_config, save_config

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, config):
    path = tmp_path / "config.json"
    save_config(config, path)
    return path


@pytest.fixture
def invoke(config_file):
    def _invoke(*args, **kwargs):
        return runner.invoke(app, list(args), env={CONFIG_ENV_VAR: str(config_file)}, **kwargs)

    return _invoke


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "reclaim version" in result.stdout

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert "reclaim version" in result.stdout


class TestHelp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "scan" in result.stdout
        assert "clean" in result.stdout
        assert "duplicates" in result.stdout

    def test_clean_help(self):
        result = runner.invoke(app, ["clean", "--help"])
        assert result.exit_code == 0
        assert "--category" in result.stdout
        assert "--dry-run" in result.stdout


class TestList:
    def test_list_command(self):
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "Safe to Clean" in result.stdout
        assert "Review Needed" in result.stdout
        assert "old_downloads" in result.stdout


class TestExplain:
    def test_explain_valid_category(self, invoke):
        result = invoke("explain", "logs")
        assert result.exit_code == 0
        assert "Logs" in result.stdout
        assert "What is it?" in result.stdout
        assert "7 days" in result.stdout

    def test_explain_invalid_category(self, invoke):
        result = invoke("explain", "nonexistent")
        assert result.exit_code == 1
        assert "Unknown category" in result.stdout


class TestScan:
    def test_empty_home(self, invoke):
        result = invoke("scan")
        assert result.exit_code == 0
        assert "Nothing to clean" in result.stdout

    def test_shows_categories(self, invoke, home, make_file):
        make_file(home / "Library" / "Caches" / "com.acme.editor" / "data", 2 * MB)
        result = invoke("scan", "--items")
        assert result.exit_code == 0
        assert "App Cache" in result.stdout
        assert "Largest Items" in result.stdout


class TestClean:
    def test_unknown_category(self, invoke):
        result = invoke("clean", "--category", "bogus")
        assert result.exit_code == 1
        assert "Unknown category" in result.stdout

    def test_nothing_to_clean(self, invoke):
        result = invoke("clean", "--yes")
        assert result.exit_code == 0
        assert "Nothing to clean" in result.stdout

    def test_dry_run(self, invoke, home, make_file, trash):
        cache = make_file(home / "Library" / "Caches" / "com.apple.helpd", 600 * KB)
        result = invoke("clean", "--dry-run")
        assert result.exit_code == 0
        assert "DRY RUN" in result.stdout
        assert cache.exists()
        trash.assert_not_called()

    def test_cleans_safe_categories_by_default(self, invoke, home, make_file, trash):
        cache = make_file(home / "Library" / "Caches" / "com.apple.helpd", 600 * KB)
        installer = make_file(home / "Downloads" / "old.dmg", 100, age_days=40)
        result = invoke("clean", "--yes")
        assert result.exit_code == 0
        assert "Cleanup Complete" in result.stdout
        assert not cache.exists()
        assert installer.exists()

    def test_all_includes_review(self, invoke, home, make_file, trash):
        installer = make_file(home / "Downloads" / "old.dmg", 100, age_days=40)
        result = invoke("clean", "--all", "--yes")
        assert result.exit_code == 0
        assert not installer.exists()

    def test_single_category(self, invoke, home, make_file, trash):
        cache = make_file(home / "Library" / "Caches" / "com.apple.helpd", 600 * KB)
        log = make_file(home / "Library" / "Logs" / "old.log", 100, age_days=10)
        result = invoke("clean", "--category", "logs", "--yes")
        assert result.exit_code == 0
        assert cache.exists()
        assert not log.exists()

    def test_declined_confirmation(self, invoke, home, make_file, trash):
        cache = make_file(home / "Library" / "Caches" / "com.apple.helpd", 600 * KB)
        result = invoke("clean", input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.stdout
        assert cache.exists()


class TestDuplicates:
    def test_finds_groups(self, invoke, home, make_file):
        make_file(home / "Downloads" / "a.bin", 4096)
        make_file(home / "Downloads" / "b.bin", 4096)
        result = invoke("duplicates")
        assert result.exit_code == 0
        assert "1 duplicate groups" in result.stdout

    def test_explicit_directory(self, invoke, tmp_path, make_file):
        make_file(tmp_path / "photos" / "a.jpg", 4096)
        result = invoke("duplicates", str(tmp_path / "photos"))
        assert result.exit_code == 0
        assert "No duplicate files found" in result.stdout

    def test_missing_directory(self, invoke, tmp_path):
        result = invoke("duplicates", str(tmp_path / "missing"))
        assert result.exit_code == 1


class TestDelete:
    def test_deletes_path(self, invoke, home, make_file, trash):
        path = make_file(home / "Downloads" / "a.bin", 10)
        result = invoke("delete", str(path), "--yes")
        assert result.exit_code == 0
        assert not path.exists()

    def test_refuses_outside_home(self, invoke, tmp_path, make_file, trash):
        path = make_file(tmp_path / "outside.bin", 10)
        result = invoke("delete", str(path), "--yes")
        assert result.exit_code == 1
        assert path.exists()


class TestProtections:
    def test_protect_and_unprotect(self, invoke, config_file, home):
        (home / "Projects").mkdir()

        result = invoke("protect", str(home / "Projects"))
        assert result.exit_code == 0
        assert str(home / "Projects") in load_config(config_file).protected_paths

        result = invoke("protections")
        assert result.exit_code == 0
        assert "Protected Paths" in result.stdout

        result = invoke("unprotect", str(home / "Projects"))
        assert result.exit_code == 0
        assert load_config(config_file).protected_paths == []

    def test_protect_missing_path(self, invoke, home):
        result = invoke("protect", str(home / "missing"))
        assert result.exit_code == 1

    def test_unprotect_unknown(self, invoke, home):
        result = invoke("unprotect", str(home / "Projects"))
        assert result.exit_code == 1

    def test_no_protections(self, invoke):
        result = invoke("protections")
        assert result.exit_code == 0
        assert "No protected paths" in result.stdout

    def test_protected_path_never_scanned(self, invoke, config_file, home, make_file):
        make_file(home / "Library" / "Caches" / "com.acme.editor" / "data", 2 * MB)
        data = json.loads(config_file.read_text())
        data["protected_paths"] = [str(home / "Library" / "Caches" / "com.acme.editor")]
        config_file.write_text(json.dumps(data))

        result = invoke("scan")
        assert result.exit_code == 0
        assert "Nothing to clean" in result.stdout
