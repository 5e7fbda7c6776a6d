"""
Unit tests for filesystem entities.

Tests:
- Path predicates (check_path / Entity.test)
- FileEntity reading, writing, prepending and line counting
- DirEntity listing, traversal and recursive removal
- Entity factories
"""

import os
import sys
import pytest
from pathlib import Path

from fskit.core.entity import (
    Check,
    CheckResult,
    DirEntity,
    DirectoryEntry,
    FileEntity,
    check_path as run_check,
    dir_entity,
    entity_from_entry,
    file_entity,
)
from fskit.core.exceptions import (
    EntityReadError,
    EntityRemovalError,
    EntityWriteError,
)

IS_WINDOWS = sys.platform == "win32"
IS_ROOT = hasattr(os, "geteuid") and os.geteuid() == 0


@pytest.fixture
def sample_file(tmp_path):
    """Create a sample file for testing."""
    file_path = tmp_path / "sample.txt"
    file_path.write_text("Hello, World!")
    return file_path


# ============================================================================
# Predicates
# ============================================================================


class TestCheckPath:
    """Test check_path() and CheckResult."""

    def test_passing_result_is_truthy(self, sample_file):
        """Test a passing check."""
        result = run_check(sample_file, Check.EXISTS | Check.FILE | Check.READABLE)
        assert result
        assert result.error is None
        assert str(result) == "passed"

    def test_missing_path_reports_existence_first(self, tmp_path):
        """Test existence is checked before type and permissions."""
        missing = tmp_path / "missing"
        result = run_check(missing, Check.WRITABLE | Check.FILE | Check.EXISTS)
        assert not result
        assert result.error == f"'{missing}' does not exist"

    def test_type_checked_before_permissions(self, tmp_path):
        """Test a directory tested as a file fails on type."""
        result = run_check(tmp_path, Check.EXISTS | Check.FILE | Check.EXECUTABLE)
        assert not result
        assert "is not a file" in result.error

    def test_directory_check(self, sample_file):
        """Test a file tested as a directory fails on type."""
        result = run_check(sample_file, Check.DIR)
        assert not result
        assert "is not a directory" in result.error

    @pytest.mark.skipif(IS_WINDOWS or IS_ROOT, reason="POSIX permissions, non-root")
    def test_unreadable_file(self, sample_file):
        """Test permission failures are reported as values."""
        sample_file.chmod(0o000)
        try:
            result = run_check(sample_file, Check.EXISTS | Check.READABLE)
            assert not result
            assert "is not readable" in result.error
        finally:
            sample_file.chmod(0o644)

    def test_repr(self):
        """Test CheckResult representation."""
        assert repr(CheckResult(False, "boom")) == "CheckResult(passed=False, error='boom')"


# ============================================================================
# Entity Basics
# ============================================================================


class TestEntityBasics:
    """Test behavior shared by both entity variants."""

    def test_path_and_components(self):
        """Test path accessors."""
        entity = FileEntity("/srv/app/config.yaml")
        assert entity.path == "/srv/app/config.yaml"
        assert str(entity) == "/srv/app/config.yaml"
        assert os.fspath(entity) == "/srv/app/config.yaml"
        assert entity.dirname == "/srv/app"
        assert entity.basename == "config.yaml"
        assert entity.is_absolute()

    def test_variant_predicates(self):
        """Test is_file/is_dir reflect the variant, not the disk."""
        assert FileEntity("/x").is_file()
        assert not FileEntity("/x").is_dir()
        assert DirEntity("/x").is_dir()
        assert not DirEntity("/x").is_file()

    def test_equality_depends_on_variant(self):
        """Test entities compare by variant and path."""
        assert FileEntity("/a") == FileEntity("/a")
        assert FileEntity("/a") != DirEntity("/a")
        assert len({FileEntity("/a"), FileEntity("/a"), DirEntity("/a")}) == 2

    def test_get_parent(self):
        """Test parent lookup."""
        assert FileEntity("/a/b").get_parent() == DirEntity("/a")
        assert DirEntity("/").get_parent() is None
        assert FileEntity("b.txt").get_parent() is None
        assert FileEntity("b.txt").get_dir() == DirEntity(".")

    def test_normalize_returns_same_variant(self):
        """Test normalization produces a new entity of the same type."""
        original = DirEntity("/a/./b/../c/")
        normalized = original.normalize()
        assert isinstance(normalized, DirEntity)
        assert normalized.path == "/a/c"
        assert original.path == "/a/./b/../c/"

    def test_normalize_to(self):
        """Test normalization against a base directory."""
        entity = FileEntity("../lib/x.py").normalize_to("/srv/app/bin")
        assert entity == FileEntity("/srv/app/lib/x.py")

    def test_get_relative_path(self):
        """Test relative path from an entity."""
        assert FileEntity("/one/two/file.txt").get_relative_path("/one/file.txt") == (
            "../file.txt"
        )

    def test_implied_type_check(self, tmp_path, sample_file):
        """Test each variant adds its own type predicate."""
        assert not FileEntity(tmp_path).test(Check.EXISTS)
        assert DirEntity(tmp_path).test(Check.EXISTS)
        assert FileEntity(sample_file).test(Check.EXISTS)
        assert not DirEntity(sample_file).test(Check.EXISTS)

    def test_factories_normalize(self):
        """Test factory functions normalize the path."""
        assert file_entity("/a/../b.txt").path == "/b.txt"
        assert dir_entity("/a/b/./").path == "/a/b"


# ============================================================================
# FileEntity
# ============================================================================


class TestFileEntity:
    """Test FileEntity operations."""

    def test_names(self):
        """Test extension helpers."""
        entity = FileEntity("/tmp/Report.TXT")
        assert entity.get_extension() == "TXT"
        assert entity.has_extension("txt")
        assert not entity.has_extension("md")
        assert entity.split_name() == ("Report", "TXT")
        assert FileEntity("/tmp/Makefile").get_extension("mk") == "mk"

    def test_size(self, sample_file):
        """Test byte size and formatted size."""
        entity = FileEntity(sample_file)
        assert entity.get_byte_size() == 13
        assert entity.get_size() == "13 bytes"

    def test_size_of_missing_file(self, tmp_path):
        """Test stat failures raise a read error."""
        with pytest.raises(EntityReadError, match="does not exist"):
            FileEntity(tmp_path / "missing").get_byte_size()

    def test_read(self, sample_file):
        """Test reading text and bytes from an offset."""
        entity = FileEntity(sample_file)
        assert entity.read() == "Hello, World!"
        assert entity.read(7) == "World!"
        assert entity.read_bytes(7) == b"World!"

    def test_read_missing_file(self, tmp_path):
        """Test reading a missing file raises with the path attached."""
        missing = tmp_path / "missing.txt"
        with pytest.raises(EntityReadError) as exc_info:
            FileEntity(missing).read()
        assert exc_info.value.path == str(missing)

    def test_write_creates_parent_directories(self, tmp_path):
        """Test write prepares missing parents."""
        target = tmp_path / "new" / "sub" / "f.txt"
        entity = FileEntity(target)
        assert entity.can_write()
        entity.write("hi")
        assert target.read_text() == "hi"

    def test_write_replaces_contents(self, sample_file):
        """Test write truncates existing contents."""
        FileEntity(sample_file).write(b"bytes")
        assert sample_file.read_bytes() == b"bytes"

    def test_append(self, tmp_path):
        """Test append creates and extends a file."""
        entity = FileEntity(tmp_path / "log.txt")
        entity.append("a")
        entity.append("b")
        assert entity.read() == "ab"

    def test_prepend_in_memory(self, sample_file):
        """Test prepending small files."""
        FileEntity(sample_file).prepend(">> ")
        assert sample_file.read_text() == ">> Hello, World!"

    def test_prepend_streaming(self, sample_file):
        """Test prepending above the memory limit goes through a temp file."""
        FileEntity(sample_file).prepend(">> ", max_memory=4)
        assert sample_file.read_text() == ">> Hello, World!"
        assert os.listdir(sample_file.parent) == ["sample.txt"]

    @pytest.mark.skipif(IS_WINDOWS, reason="POSIX file modes")
    def test_prepend_streaming_keeps_mode(self, sample_file):
        """Test the replaced file keeps its permissions."""
        sample_file.chmod(0o640)
        FileEntity(sample_file).prepend("x" * 100, max_memory=10)
        assert (sample_file.stat().st_mode & 0o777) == 0o640

    def test_prepend_missing_file(self, tmp_path):
        """Test prepending requires an existing file."""
        with pytest.raises(EntityWriteError, match="does not exist"):
            FileEntity(tmp_path / "missing").prepend("x")

    def test_line_count(self, tmp_path):
        """Test counting newlines, including across chunk boundaries."""
        target = tmp_path / "lines.txt"
        target.write_bytes(b"a\r\nb\r\nc")
        entity = FileEntity(target)
        assert entity.get_line_count(b"\r\n", chunk_size=2) == 2
        assert entity.get_line_count("\n", chunk_size=1) == 2
        assert entity.get_line_count(b"\r\n") == 2

    def test_reverse_lines(self, tmp_path):
        """Test the reverse reader factory."""
        target = tmp_path / "lines.txt"
        target.write_text("one\ntwo\nthree")
        with FileEntity(target).reverse_lines("\n", chunk_size=4) as reader:
            assert list(reader) == ["three", "two", "one"]

    def test_remove(self, sample_file):
        """Test removing a file."""
        FileEntity(sample_file).remove()
        assert not sample_file.exists()

    def test_remove_missing(self, tmp_path):
        """Test removing a missing file raises."""
        with pytest.raises(EntityRemovalError, match="failed to delete"):
            FileEntity(tmp_path / "missing").remove()


# ============================================================================
# DirEntity
# ============================================================================


class TestDirEntity:
    """Test DirEntity operations."""

    def test_children(self, tmp_path):
        """Test child entity construction."""
        directory = DirEntity(tmp_path)
        assert directory.get_file("x.txt") == FileEntity(f"{tmp_path}/x.txt")
        assert directory.get_dir("sub") == DirEntity(f"{tmp_path}/sub")
        assert DirEntity("/").get_file("etc") == FileEntity("/etc")

    def test_is_empty(self, tmp_path):
        """Test emptiness check."""
        directory = DirEntity(tmp_path)
        assert directory.is_empty()
        (tmp_path / "f").write_text("")
        assert not directory.is_empty()

    def test_is_empty_missing(self, tmp_path):
        """Test emptiness of a missing directory raises."""
        with pytest.raises(EntityReadError):
            DirEntity(tmp_path / "missing").is_empty()

    def test_get_list(self, sample_tree):
        """Test listing returns typed, sorted children."""
        directory = DirEntity(sample_tree)
        assert directory.list_names() == ["a.txt", "b.py", "sub"]
        children = directory.get_list()
        assert [type(c) for c in children] == [FileEntity, FileEntity, DirEntity]

    def test_iter_entries_recursive_order(self, sample_tree):
        """Test each directory precedes its children."""
        root = str(sample_tree)
        entries = list(DirEntity(root).iter_entries(recursive=True))
        assert [e.path[len(root) + 1 :] for e in entries] == [
            "a.txt",
            "b.py",
            "sub",
            "sub/c.txt",
            "sub/deep",
            "sub/deep/d.py",
        ]
        deep = entries[4]
        assert deep.is_dir and not deep.is_file
        assert deep.parent == f"{root}/sub"
        assert deep.name == "deep"
        assert deep.real_path == deep.path

    def test_iter_entries_flat(self, sample_tree):
        """Test non-recursive listing."""
        names = [e.name for e in DirEntity(sample_tree).iter_entries()]
        assert names == ["a.txt", "b.py", "sub"]

    @pytest.mark.skipif(IS_WINDOWS, reason="Symlinks require privileges on Windows")
    def test_iter_entries_does_not_follow_dir_links(self, sample_tree):
        """Test symlinked directories are reported but not descended into."""
        os.symlink(sample_tree / "sub", sample_tree / "zlink")
        entries = list(DirEntity(sample_tree).iter_entries(recursive=True))
        link = entries[-1]
        assert link.name == "zlink"
        assert link.is_symlink
        assert link.real_path == str(sample_tree / "sub")
        assert not any(e.parent.endswith("zlink") for e in entries)

    def test_can_write_missing_nested(self, tmp_path):
        """Test writability is judged by the nearest existing ancestor."""
        assert DirEntity(tmp_path / "a" / "b" / "c").can_write()

    def test_prepare_write_creates_tree(self, tmp_path):
        """Test directory creation."""
        target = tmp_path / "a" / "b"
        DirEntity(target).prepare_write()
        assert target.is_dir()

    def test_recursive_remove(self, sample_tree):
        """Test children are removed before the directory."""
        DirEntity(sample_tree).remove()
        assert not sample_tree.exists()

    @pytest.mark.skipif(IS_WINDOWS, reason="Symlinks require privileges on Windows")
    def test_remove_link_keeps_target(self, sample_tree, tmp_path):
        """Test removing a directory link leaves the target intact."""
        link = tmp_path / "link"
        os.symlink(sample_tree, link)
        DirEntity(link).remove()
        assert not os.path.lexists(link)
        assert (sample_tree / "sub" / "c.txt").exists()

    @pytest.mark.skipif(IS_WINDOWS, reason="Symlinks require privileges on Windows")
    def test_remove_tree_with_link_keeps_target(self, sample_tree, tmp_path):
        """Test links inside a removed tree are not followed."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")
        os.symlink(outside, sample_tree / "out")
        DirEntity(sample_tree).remove()
        assert not sample_tree.exists()
        assert (outside / "keep.txt").read_text() == "keep"

    def test_remove_missing(self, tmp_path):
        """Test removing a missing directory raises."""
        with pytest.raises(EntityRemovalError, match="does not exist"):
            DirEntity(tmp_path / "missing").remove()


class TestEntityFromEntry:
    """Test entity_from_entry()."""

    def test_uses_resolved_path(self):
        """Test the entity wraps the resolved location."""
        entry = DirectoryEntry(
            path="/a/link",
            parent="/a",
            name="link",
            is_file=False,
            is_dir=True,
            is_symlink=True,
            real_path="/b/target",
        )
        assert entity_from_entry(entry) == DirEntity("/b/target")

    def test_file_entry(self):
        """Test non-directories become files."""
        entry = DirectoryEntry("/a/f", "/a", "f", True, False, False, "/a/f")
        assert entity_from_entry(entry) == FileEntity("/a/f")


def test_sample_tree_fixture_is_resolved(sample_tree):
    """Test the shared fixture yields a canonical path."""
    assert Path(os.path.realpath(sample_tree)) == sample_tree
