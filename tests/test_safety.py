"""Tests for path safety checks."""

import os

from reclaim.safety import allowed_roots, is_path_allowed, is_protected, resolve_path


class TestResolvePath:
    def test_keeps_final_symlink(self, home, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        link = home / "link"
        os.symlink(target, link)
        assert resolve_path(link) == resolve_path(home) / "link"

    def test_resolves_symlinked_parent(self, home, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        os.symlink(outside, home / "alias")
        resolved = resolve_path(home / "alias" / "file")
        assert resolved == resolve_path(outside) / "file"


class TestAllowedRoots:
    def test_home_and_temp(self, config, home, tmp_path):
        roots = allowed_roots(config)
        assert os.path.realpath(home) in [str(r) for r in roots]
        assert os.path.realpath(tmp_path / "tmp") in [str(r) for r in roots]


class TestIsPathAllowed:
    def test_inside_home(self, config, home):
        assert is_path_allowed(home / "Library" / "Caches" / "x", config)

    def test_inside_temp(self, config, tmp_path):
        assert is_path_allowed(tmp_path / "tmp" / "scratch", config)

    def test_home_itself_rejected(self, config, home):
        assert not is_path_allowed(home, config)

    def test_outside_rejected(self, config, tmp_path):
        assert not is_path_allowed(tmp_path / "elsewhere", config)

    def test_system_path_rejected(self, config):
        assert not is_path_allowed("/usr/bin", config)

    def test_dotdot_escape_rejected(self, config, home):
        assert not is_path_allowed(str(home / ".." / "elsewhere"), config)

    def test_symlinked_parent_escape_rejected(self, config, home, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        os.symlink(outside, home / "alias")
        assert not is_path_allowed(home / "alias" / "file", config)

    def test_protected_rejected(self, config, home):
        config.protected_paths.append(str(home / "Projects"))
        assert not is_path_allowed(home / "Projects" / "app", config)


class TestIsProtected:
    def test_protected_path_itself(self, config, home):
        config.protected_paths.append(str(home / "Projects"))
        assert is_protected(home / "Projects", config)

    def test_parent_of_protected(self, config, home):
        config.protected_paths.append(str(home / "Library" / "Keep"))
        assert is_protected(home / "Library", config)

    def test_sibling_not_protected(self, config, home):
        config.protected_paths.append(str(home / "Projects"))
        assert not is_protected(home / "ProjectsOld", config)

    def test_tilde_protection(self, config, home):
        config.protected_paths.append("~/Projects")
        assert is_protected(home / "Projects" / "x", config)

    def test_xcode_archives(self, config, home):
        archives = home / "Library" / "Developer" / "Xcode" / "Archives" / "2024-01-01"
        assert is_protected(archives, config)

    def test_derived_data_not_protected(self, config, home):
        assert not is_protected(home / "Library" / "Developer" / "Xcode" / "DerivedData", config)
