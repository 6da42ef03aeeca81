"""Shared fixtures for treewalk tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a standard test directory tree.

    Structure::

        root/
        ├── .env
        ├── docs/
        │   └── guide.md
        ├── src/
        │   ├── api/
        │   │   ├── auth.py
        │   │   └── user.py
        │   └── models/
        │       └── user.py
        ├── tests/
        │   └── test_user.py
        └── README.md
    """
    (tmp_path / ".env").write_text("env")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("guide")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "api").mkdir()
    (tmp_path / "src" / "api" / "auth.py").write_text("auth")
    (tmp_path / "src" / "api" / "user.py").write_text("user")
    (tmp_path / "src" / "models").mkdir()
    (tmp_path / "src" / "models" / "user.py").write_text("user")
    (tmp_path / "tests").mkdir()
    (tmp_path / "tests" / "test_user.py").write_text("test")
    (tmp_path / "README.md").write_text("readme")
    return tmp_path


@pytest.fixture
def loop_tree(tmp_path: Path) -> Path:
    """Tree whose symlinks point back at ancestors.

    Structure::

        root/
        ├── a/
        │   ├── b/
        │   │   ├── file.txt
        │   │   └── up -> ../..      (relative, to root)
        │   └── self -> <abs a>      (absolute, to a)
        └── z.txt
    """
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "a" / "b" / "file.txt").write_text("f")
    (tmp_path / "z.txt").write_text("z")
    os.symlink(os.path.join("..", ".."), tmp_path / "a" / "b" / "up")
    os.symlink(tmp_path / "a", tmp_path / "a" / "self")
    return tmp_path
