"""
Unit tests for search paths and the path relativizer
"""
import pytest

from useralt.errors import UnresolvablePath
from useralt.paths import SearchPaths, relativize, require_relative, split_search_path


class TestSearchPaths:
    """Tests for SearchPaths construction"""

    def test_split_search_path(self):
        """Test empty entries are dropped and trailing slashes removed"""
        assert split_search_path("/usr/bin::/bin/:/usr/bin") == ("/usr/bin", "/bin")

    def test_split_empty(self):
        assert split_search_path(None) == ()
        assert split_search_path("") == ()

    def test_from_environment(self):
        """Test PATH and MANPATH are read from the given mapping"""
        paths = SearchPaths.from_environment(
            {"PATH": "/usr/local/bin:/usr/bin", "MANPATH": "/opt/man"},
            manual_fallback=["/usr/share/man"],
        )
        assert paths.executables == ("/usr/local/bin", "/usr/bin")
        assert paths.manuals == ("/opt/man",)

    def test_manpath_fallback_when_unset(self):
        """Test unset MANPATH uses the fallback directories"""
        paths = SearchPaths.from_environment({"PATH": "/usr/bin"}, manual_fallback=["/usr/share/man"])
        assert paths.manuals == ("/usr/share/man",)

    def test_manpath_empty_entry_expands_fallback(self):
        """Test an empty MANPATH entry is filled with the defaults"""
        paths = SearchPaths.from_environment(
            {"MANPATH": "/opt/man:"},
            manual_fallback=["/usr/share/man"],
        )
        assert paths.manuals == ("/opt/man", "/usr/share/man")

    def test_with_prefix(self):
        """Test prefixed directories come first"""
        paths = SearchPaths.of(["/usr/bin"], ["/usr/share/man"]).with_prefix(["/home/u/o/bin"], ["/home/u/o/man"])
        assert paths.executables == ("/home/u/o/bin", "/usr/bin")
        assert paths.manuals == ("/home/u/o/man", "/usr/share/man")


class TestRelativize:
    """Tests for relativize"""

    def test_executable(self):
        paths = SearchPaths.of(executables=["/usr/bin"])
        result = relativize("/usr/bin/less", paths)
        assert result is not None
        assert result.kind == "bin"
        assert result.path == "bin/less"

    def test_manual_page(self):
        paths = SearchPaths.of(manuals=["/usr/share/man"])
        result = relativize("/usr/share/man/man1/less.1.gz", paths)
        assert result is not None
        assert result.kind == "man"
        assert result.path == "man/man1/less.1.gz"

    def test_manual_page_deeper(self):
        """Test every consumed segment is kept in order"""
        paths = SearchPaths.of(manuals=["/usr/share/man"])
        result = relativize("/usr/share/man/de/man1/less.1.gz", paths)
        assert result.path == "man/de/man1/less.1.gz"

    def test_manual_dir_itself(self):
        """Test a file directly in a manual directory"""
        paths = SearchPaths.of(manuals=["/usr/share/man"])
        assert relativize("/usr/share/man/index.db", paths).path == "man/index.db"

    def test_unclassifiable(self):
        assert relativize("/opt/weird/tool", SearchPaths()) is None

    @pytest.mark.parametrize("path", ["tool", "./tool", "/tool"])
    def test_unclassifiable_trivial_dirs(self, path):
        """Test empty, dot and root directories are never relocated"""
        paths = SearchPaths.of(executables=["/", "."], manuals=["/"])
        assert relativize(path, paths) is None

    def test_segment_boundary(self):
        """Test membership matches whole entries, not substrings"""
        paths = SearchPaths.of(executables=["/usr/bin"], manuals=["/usr/share/man"])
        assert relativize("/usr/bin2/less", paths) is None
        assert relativize("/usr/share/manual/x.1", paths) is None
        assert relativize("/us/less", paths) is None

    def test_executable_only_direct_child(self):
        """Test executable directories are not matched by ancestor walk"""
        paths = SearchPaths.of(executables=["/usr"])
        assert relativize("/usr/bin/less", paths) is None

    @pytest.mark.parametrize("suffix", ["bin/less", "man/man1/less.1.gz", "man/x.7"])
    def test_round_trip(self, suffix):
        """Test relativizing a root-prefixed suffix with that root's dirs returns the suffix"""
        root = "/home/u/.config/my"
        paths = SearchPaths.of(executables=[f"{root}/bin"], manuals=[f"{root}/man"])
        assert relativize(f"{root}/{suffix}", paths).path == suffix

    def test_require_relative_raises(self):
        with pytest.raises(UnresolvablePath) as excinfo:
            require_relative("/opt/weird/tool", SearchPaths())
        assert excinfo.value.path == "/opt/weird/tool"
