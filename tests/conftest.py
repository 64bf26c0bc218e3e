"""Shared fixtures: a throwaway home directory and a config pointing at it."""

import os
import shutil
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from reclaim.config import ReclaimConfig


def write_file(path: Path, size: int, age_days: float = 0, fill: bytes = b"\0") -> Path:
    """Create a file of exactly *size* bytes, optionally backdated."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(fill * size)
    if age_days:
        mtime = time.time() - age_days * 24 * 60 * 60
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def make_file():
    return write_file


@pytest.fixture
def home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def config(tmp_path, home):
    temp = tmp_path / "tmp"
    temp.mkdir()
    return ReclaimConfig(
        home=home,
        temp_dirs=[temp],
        application_dirs=["~/Applications"],
        duplicate_dirs=["~/Downloads"],
        max_workers=2,
        scan_workers=2,
        use_du=False,
        registry_timeout=2.0,
    )


@pytest.fixture
def trash(tmp_path):
    """Replace send2trash with a move into a Trash folder outside the home."""
    trash_dir = tmp_path / "Trash"
    trash_dir.mkdir()
    moved = []

    def fake_send2trash(path):
        path = str(path)
        if not os.path.lexists(path):
            raise FileNotFoundError(path)
        target = trash_dir / f"{len(moved)}-{Path(path).name}"
        shutil.move(path, target)
        moved.append(path)

    with patch("reclaim.cleaner.send2trash", side_effect=fake_send2trash) as mock:
        mock.moved = moved
        yield mock
