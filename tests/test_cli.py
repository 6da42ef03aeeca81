"""Tests for treewalk.cli: CLI entry point.

Tests here cover:
  - Error paths (nonexistent dir, invalid -L, bad patterns, incompatible options)
  - I/O paths (main() with stdout, -o output file and stderr reporting)
  - Smoke tests that touch the full stack with a realistic tree

Detailed traversal and rendering behaviour is covered by test_walker.py
and test_compat.py.
"""

import os
import sys
from pathlib import Path

import pytest

from treewalk import TwalkError
from treewalk.cli import main, run_twalk


def _build_tree(tmp_path: Path) -> Path:
    """Realistic test tree including 'noise' directories like node_modules."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("main")
    (tmp_path / "src" / "utils.py").write_text("utils")
    (tmp_path / "tests").mkdir()
    (tmp_path / "tests" / "test_main.py").write_text("test")
    (tmp_path / "README.md").write_text("readme")
    (tmp_path / ".env").write_text("secret")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "pkg").mkdir()
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("js")
    return tmp_path


def _names(output: str) -> list[str]:
    """Extract entry names from compat output lines."""
    return [line.split("── ", 1)[1] for line in output.splitlines() if "── " in line]


class TestRunTwalk:
    # ------------------------------------------------------------------
    # Smoke / full-stack checks
    # ------------------------------------------------------------------
    def test_default_output(self, tmp_path: Path) -> None:
        root = _build_tree(tmp_path)
        output = run_twalk([str(root)])
        assert output.split("\n")[0] == str(root)
        assert "├── src" in output
        assert "README.md" in output
        assert ".env" not in output
        assert output.endswith("4 directories, 5 files")

    def test_default_directory_is_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _build_tree(tmp_path)
        monkeypatch.chdir(tmp_path)
        assert run_twalk([]).split("\n")[0] == "."

    def test_all_files(self, tmp_path: Path) -> None:
        root = _build_tree(tmp_path)
        assert ".env" in _names(run_twalk([str(root), "-a"]))

    def test_max_depth(self, tmp_path: Path) -> None:
        root = _build_tree(tmp_path)
        output = run_twalk([str(root), "-L", "1"])
        # GNU tree -L 1: root's immediate children only
        assert "src" in _names(output)
        assert "main.py" not in output

    def test_dirs_only(self, tmp_path: Path) -> None:
        root = _build_tree(tmp_path)
        output = run_twalk([str(root), "-d", "--noreport"])
        assert _names(output) == ["node_modules", "pkg", "src", "tests"]

    def test_include_pattern(self, tmp_path: Path) -> None:
        root = _build_tree(tmp_path)
        names = _names(run_twalk([str(root), "-P", "*.py", "--noreport"]))
        assert "main.py" in names
        assert "README.md" not in names
        assert "index.js" not in names
        assert "node_modules" in names

    def test_exclude_pattern(self, tmp_path: Path) -> None:
        root = _build_tree(tmp_path)
        names = _names(run_twalk([str(root), "-I", "[a-z]*.py", "--noreport"]))
        assert "main.py" not in names
        assert "test_main.py" not in names
        assert "README.md" in names

    def test_dirsfirst(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("b")
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "z").mkdir()
        assert _names(run_twalk([str(tmp_path), "--dirsfirst"])) == ["z", "a.txt", "b.txt"]

    def test_reverse(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("b")
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "z").mkdir()
        assert _names(run_twalk([str(tmp_path), "-r"])) == ["z", "b.txt", "a.txt"]

    def test_mtime_sort(self, tmp_path: Path) -> None:
        (tmp_path / "old.txt").write_text("o")
        (tmp_path / "new.txt").write_text("n")
        os.utime(tmp_path / "old.txt", (1000, 1000))
        os.utime(tmp_path / "new.txt", (2000, 2000))
        assert _names(run_twalk([str(tmp_path), "-t"])) == ["old.txt", "new.txt"]

    def test_human_size_flag(self, tmp_path: Path) -> None:
        (tmp_path / "big.bin").write_bytes(b"\x00" * 2048)
        assert "[2.0K]  big.bin" in run_twalk([str(tmp_path), "-h"])

    def test_timefmt_implies_date(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_text("f")
        output = run_twalk([str(tmp_path), "--timefmt", "%Y"])
        assert "[" in output
        assert "]  f.txt" in output

    def test_filelimit(self, tmp_path: Path) -> None:
        (tmp_path / "few").mkdir()
        (tmp_path / "few" / "one.txt").write_text("1")
        (tmp_path / "many").mkdir()
        for name in ("a.txt", "b.txt", "c.txt"):
            (tmp_path / "many" / name).write_text(name)
        output = run_twalk([str(tmp_path), "--filelimit", "2", "--noreport"])
        assert _names(output) == ["few", "one.txt", "many"]

    def test_output_file(self, tmp_path: Path) -> None:
        """-o returns the string; main() handles actual file write."""
        root = _build_tree(tmp_path)
        out_file = tmp_path / "output.txt"
        output = run_twalk([str(root), "-o", str(out_file)])
        assert "src" in output

    # ------------------------------------------------------------------
    # Error paths
    # ------------------------------------------------------------------
    def test_nonexistent_directory(self) -> None:
        with pytest.raises(TwalkError, match="not a directory"):
            run_twalk(["/nonexistent/path/xyz"])

    @pytest.mark.parametrize("level", ["0", "-1"])
    def test_max_depth_invalid_values(self, tmp_path: Path, level: str) -> None:
        with pytest.raises(TwalkError, match="Invalid level"):
            run_twalk([str(tmp_path), "-L", level])

    @pytest.mark.parametrize("limit", ["0", "-3"])
    def test_filelimit_invalid_values(self, tmp_path: Path, limit: str) -> None:
        with pytest.raises(TwalkError, match="Invalid file limit"):
            run_twalk([str(tmp_path), "--filelimit", limit])

    @pytest.mark.parametrize("pattern", ["[]", "a[bc", "[a-"])
    def test_malformed_pattern(self, tmp_path: Path, pattern: str) -> None:
        with pytest.raises(TwalkError, match="invalid pattern"):
            run_twalk([str(tmp_path), "-P", pattern])

    def test_include_and_exclude_incompatible(self, tmp_path: Path) -> None:
        with pytest.raises(TwalkError, match="incompatible"):
            run_twalk([str(tmp_path), "-P", "*.py", "-I", "*.md"])

    def test_quote_flags_mutually_exclusive(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            run_twalk([str(tmp_path), "-q", "-N"])


class TestMain:
    def test_writes_stdout(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        root = _build_tree(tmp_path)
        monkeypatch.setattr(sys, "argv", ["twalk", str(root)])
        main()
        captured = capsys.readouterr()
        assert captured.out.startswith(str(root))
        assert captured.out.endswith("files\n")
        assert captured.err == ""

    def test_writes_output_file(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "tree").mkdir()
        root = _build_tree(tmp_path / "tree")
        out_file = tmp_path / "output.txt"
        monkeypatch.setattr(sys, "argv", ["twalk", str(root), "-o", str(out_file)])
        main()
        assert capsys.readouterr().out == ""
        assert out_file.read_text(encoding="utf-8").startswith(str(root))

    def test_user_error_exits_1(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["twalk", "/nonexistent/path/xyz"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("twalk: ")

    def test_walk_errors_reported_on_stderr(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        root = _build_tree(tmp_path)
        real_scandir = os.scandir
        blocked = root / "src"

        def scandir(path: object) -> object:
            if Path(path) == blocked:
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)
        monkeypatch.setattr(sys, "argv", ["twalk", str(root)])
        main()
        captured = capsys.readouterr()
        assert "src" in captured.out
        assert "main.py" not in captured.out
        assert f"cannot open directory '{blocked}'" in captured.err


def _build_gitignore_cli_tree(tmp_path: Path) -> Path:
    """Create a tree with .gitignore for CLI-level tests."""
    (tmp_path / ".gitignore").write_text("*.pyc\nnode_modules/\ndist/\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("app")
    (tmp_path / "src" / "app.pyc").write_bytes(b"\x00")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("js")
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "bundle.js").write_text("bundle")
    (tmp_path / "README.md").write_text("readme")
    return tmp_path


class TestGitignoreCli:
    def test_gitignore_excludes_matching_entries(self, tmp_path: Path) -> None:
        root = _build_gitignore_cli_tree(tmp_path)
        output = run_twalk([str(root), "--gitignore", "-a"])
        assert "node_modules" not in output
        assert "app.pyc" not in output
        assert "dist" not in output
        assert "app.py" in output
        assert "README.md" in output

    def test_gitignore_with_exclude_pattern(self, tmp_path: Path) -> None:
        root = _build_gitignore_cli_tree(tmp_path)
        output = run_twalk([str(root), "--gitignore", "-I", "README.md", "-a"])
        assert "README.md" not in output
        assert "node_modules" not in output
        assert "app.py" in output

    def test_gitignore_disabled_by_default(self, tmp_path: Path) -> None:
        root = _build_gitignore_cli_tree(tmp_path)
        output = run_twalk([str(root), "-a"])
        assert "node_modules" in output
        assert "app.pyc" in output

    def test_gitignore_no_gitignore_file(self, tmp_path: Path) -> None:
        root = _build_tree(tmp_path)
        output = run_twalk([str(root), "--gitignore"])
        assert "src" in output
        assert "README.md" in output
