"""
Unit tests for filtered directory searches.
"""

import os
import pytest

from fskit.core.entity import DirEntity, Entity, FileEntity
from fskit.core.exceptions import ConfigurationError, EntityReadError
from fskit.core.locator import GenericLocator


def python_files(entity: Entity) -> bool:
    return entity.is_file() and entity.has_extension("py")


class TestGenericLocator:
    """Test GenericLocator."""

    def test_flat_search(self, sample_tree):
        """Test a non-recursive search returns direct children."""
        paths = GenericLocator().search_dir(sample_tree).get_paths()
        assert paths == [
            f"{sample_tree}/a.txt",
            f"{sample_tree}/b.py",
            f"{sample_tree}/sub",
        ]

    def test_recursive_search_with_filter(self, sample_tree):
        """Test a typed filter keeps only accepted entities."""
        locator = GenericLocator(python_files).search_dir(sample_tree, recursive=True)
        assert locator.get_paths() == [
            f"{sample_tree}/b.py",
            f"{sample_tree}/sub/deep/d.py",
        ]
        assert all(isinstance(e, FileEntity) for e in locator.get_entities())

    def test_directories_are_dir_entities(self, sample_tree):
        """Test directory results use the directory variant."""
        locator = GenericLocator(lambda e: e.is_dir()).search_dir(
            sample_tree, recursive=True
        )
        assert locator.get_entities() == [
            DirEntity(f"{sample_tree}/sub"),
            DirEntity(f"{sample_tree}/sub/deep"),
        ]

    def test_results_accumulate_without_duplicates(self, sample_tree):
        """Test repeated and overlapping searches keep one entry per path."""
        locator = GenericLocator(python_files)
        locator.search_dir(sample_tree / "sub", recursive=True)
        locator.search_dir(sample_tree, recursive=True)
        locator.search_dir(sample_tree, recursive=True)
        assert sorted(locator.get_paths()) == [
            f"{sample_tree}/b.py",
            f"{sample_tree}/sub/deep/d.py",
        ]

    @pytest.mark.skipif(os.name == "nt", reason="Symlinks require privileges on Windows")
    def test_links_resolve_to_targets(self, sample_tree):
        """Test linked entries are reported by their resolved path."""
        os.symlink(sample_tree / "b.py", sample_tree / "alias.py")
        paths = GenericLocator(python_files).search_dir(sample_tree).get_paths()
        assert paths == [f"{sample_tree}/b.py"]

    def test_set_filter_replaces_filter(self, sample_tree):
        """Test set_filter affects later searches only."""
        locator = GenericLocator(python_files).search_dir(sample_tree)
        locator.set_filter(None).search_dir(sample_tree / "sub")
        assert locator.get_paths() == [
            f"{sample_tree}/b.py",
            f"{sample_tree}/sub/c.txt",
            f"{sample_tree}/sub/deep",
        ]

    @pytest.mark.parametrize("bad_filter", ["*.py", 42, ["py"]])
    def test_non_callable_filter(self, bad_filter):
        """Test an invalid filter fails at configuration time."""
        with pytest.raises(ConfigurationError, match="filter must be callable"):
            GenericLocator(bad_filter)

    def test_missing_directory(self, tmp_path):
        """Test searching a missing directory raises."""
        with pytest.raises(EntityReadError, match="failed to search directory"):
            GenericLocator().search_dir(tmp_path / "missing")
