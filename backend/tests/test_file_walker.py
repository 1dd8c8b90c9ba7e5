"""Tests for repository file walking and language detection."""

from codesearch.core import classify
from codesearch.utils import FileWalker, walk_files


def _rels(root, **kwargs):
    return [rel for _, rel in walk_files(root, **kwargs)]


class TestWalkFiles:
    """Test candidate file enumeration."""

    def test_empty_directory_yields_nothing(self, repo):
        assert _rels(repo) == []

    def test_yields_absolute_and_relative_paths_in_sorted_order(self, repo, write_file):
        write_file("src/b.py", "b = 1\n")
        write_file("src/a.py", "a = 1\n")
        write_file("app.rb", "puts 1\n")

        results = list(walk_files(repo))

        assert [rel for _, rel in results] == ["app.rb", "src/a.py", "src/b.py"]
        for abs_path, rel in results:
            assert abs_path.is_absolute()
            assert abs_path == (repo / rel).resolve()

    def test_skips_ignored_prefixes(self, repo, write_file):
        write_file("vendor/gem.rb", "x\n")
        write_file("node_modules/lib/index.js", "x\n")
        write_file("build/out.js", "x\n")
        write_file(".git/config.yml", "x\n")
        write_file("lib/keep.rb", "x\n")

        assert _rels(repo) == ["lib/keep.rb"]

    def test_ignored_prefix_only_matches_from_root(self, repo, write_file):
        write_file("app/vendor/helper.rb", "x\n")

        assert _rels(repo) == ["app/vendor/helper.rb"]

    def test_custom_ignored_prefixes(self, repo, write_file):
        write_file("generated/api.py", "x\n")
        write_file("src/api.py", "x\n")

        assert _rels(repo, ignored_prefixes=["generated/"]) == ["src/api.py"]

    def test_extension_allowlist_is_case_insensitive(self, repo, write_file):
        write_file("README.MD", "# hi\n")
        write_file("image.png", "not really\n")
        write_file("Makefile", "all:\n")

        assert _rels(repo) == ["README.MD"]

    def test_skips_files_above_max_size(self, repo, write_file):
        write_file("big.py", "x" * 200)
        write_file("small.py", "x" * 10)

        assert _rels(repo, max_file_size=100) == ["small.py"]

    def test_skips_binary_files(self, repo):
        (repo / "blob.json").write_bytes(b"{\x00\x01}")
        (repo / "ok.json").write_bytes(b"{}")

        assert _rels(repo) == ["ok.json"]

    def test_file_walker_is_restartable(self, repo, write_file):
        write_file("a.py", "a\n")
        write_file("b.py", "b\n")
        walker = FileWalker(repo)

        first = list(walker)
        second = list(walker)

        assert first == second
        assert len(first) == 2


class TestClassify:
    """Test extension to language mapping."""

    def test_known_extensions(self):
        assert classify("app/models/user.rb") == "ruby"
        assert classify("pkg/main.py") == "python"
        assert classify("web/App.jsx") == "javascript"
        assert classify("web/App.tsx") == "typescript"
        assert classify("cmd/main.go") == "go"
        assert classify("src/lib.rs") == "rust"
        assert classify("docs/README.md") == "markdown"

    def test_extension_is_lower_cased(self):
        assert classify("LEGACY.RB") == "ruby"

    def test_unknown_extension(self):
        assert classify("notes.txt") == "unknown"
        assert classify("Dockerfile") == "unknown"
