"""Tests for glob matching and source scanning."""

import os
from pathlib import Path

from code_deps.models import Language
from code_deps.paths import matches_pattern, module_name, normalize_rel, to_project_rel
from code_deps.scanner import SourceScanner, scan_sources

FIXTURES = Path(__file__).parent / "fixtures"


class TestGlobs:
    def test_double_star_slash_matches_zero_dirs(self):
        assert matches_pattern("**/*.js", "a.js")
        assert matches_pattern("**/*.js", "deep/er/a.js")

    def test_single_star_stays_in_segment(self):
        assert matches_pattern("lib/*.js", "lib/a.js")
        assert not matches_pattern("lib/*.js", "lib/sub/a.js")

    def test_dir_double_star_matches_dir_itself(self):
        assert matches_pattern("generated/**", "generated")
        assert matches_pattern("generated/**", "generated/x/y.ts")
        assert not matches_pattern("generated/**", "generatedx/y.ts")

    def test_basename_pattern(self):
        assert matches_pattern("*.test.js", "deep/dir/app.test.js")
        assert not matches_pattern("*.test.js", "deep/dir/app.js")

    def test_leading_dot_slash_is_ignored(self):
        assert matches_pattern("./src/**", "src/a.js")
        assert matches_pattern(".hidden/*", ".hidden/a.js")

    def test_question_mark(self):
        assert matches_pattern("v?.js", "v1.js")
        assert not matches_pattern("v?.js", "v10.js")


class TestPaths:
    def test_normalize(self):
        assert normalize_rel("./src//a/../b.js") == "src/b.js"
        assert normalize_rel("src\\win\\path.js") == "src/win/path.js"
        assert normalize_rel("") == "."

    def test_project_rel_rejects_outside(self, tmp_path):
        assert to_project_rel(tmp_path, str(tmp_path / "src" / "a.js")) == "src/a.js"
        assert to_project_rel(tmp_path, "../elsewhere.js") is None
        assert to_project_rel(tmp_path, "") is None

    def test_module_name(self):
        assert module_name("src/core/a.js") == "src"
        assert module_name("index.js") == "(root)"


class TestSourceScanner:
    def test_fixture_project(self):
        root = FIXTURES / "js_project"
        files = scan_sources(root, ["src"], Language.JAVASCRIPT, ignore=["**/*.test.js"])
        assert list(files) == [
            "src/a.js",
            "src/app.js",
            "src/b.js",
            "src/index.js",
            "src/orphan.js",
            "src/utils/format.js",
            "src/utils/index.js",
        ]
        assert all(p.is_absolute() for p in files.values())

    def test_skip_dirs_pruned(self):
        root = FIXTURES / "js_project"
        files = scan_sources(root, ["src"], Language.JAVASCRIPT)
        assert not any("node_modules" in f for f in files)
        assert "src/app.test.js" in files

    def test_include_pattern_relative_to_src_dir(self):
        root = FIXTURES / "js_project"
        files = scan_sources(root, ["src"], Language.JAVASCRIPT, pattern="utils/**")
        assert list(files) == ["src/utils/format.js", "src/utils/index.js"]

    def test_ignored_directory(self, tmp_path):
        (tmp_path / "src" / "gen").mkdir(parents=True)
        (tmp_path / "src" / "gen" / "out.py").write_text("x = 1\n")
        (tmp_path / "src" / "main.py").write_text("x = 2\n")
        scanner = SourceScanner(extensions=(".py",), ignore=["gen/**"])
        assert list(scanner.scan(tmp_path, ["src"])) == ["src/main.py"]

    def test_missing_src_dir(self, tmp_path):
        scanner = SourceScanner(extensions=(".js",))
        assert scanner.scan(tmp_path, ["nope"]) == {}

    def test_symlink_loop_not_followed(self, tmp_path):
        pkg = tmp_path / "src" / "pkg"
        pkg.mkdir(parents=True)
        (pkg / "a.js").write_text("export default 1;\n")
        os.symlink(tmp_path / "src", pkg / "loop")
        os.symlink(pkg, pkg / "again")
        scanner = SourceScanner(extensions=(".js",))
        assert list(scanner.scan(tmp_path, ["src"])) == ["src/pkg/a.js"]

    def test_src_dir_symlinked_outside_root(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "x.js").write_text("")
        root = tmp_path / "project"
        root.mkdir()
        os.symlink(outside, root / "src")
        scanner = SourceScanner(extensions=(".js",))
        assert list(scanner.scan(root, ["src"])) == ["src/x.js"]

    def test_src_dir_escaping_root_is_skipped(self, tmp_path):
        (tmp_path / "sibling").mkdir()
        (tmp_path / "sibling" / "x.js").write_text("")
        root = tmp_path / "project"
        root.mkdir()
        scanner = SourceScanner(extensions=(".js",))
        assert scanner.scan(root, ["../sibling"]) == {}
