"""Tests for the recursive traversal and the processed set."""

import os

import pytest

from s3_backup.config.settings import PathConfig
from s3_backup.errors import ConsistencyError, FilesystemAccessError
from s3_backup.sync.filters import FilterRuleSet
from s3_backup.sync.traverser import ProcessedSet, Traverser


@pytest.fixture
def handled():
    return []


@pytest.fixture
def traverser(handled, console):
    def handler(path, st):
        handled.append(path)
        return st.st_size
    return Traverser(handler, console=console)


def rules(**filters):
    return FilterRuleSet.from_path_config("test", PathConfig(**filters))


class TestProcessedSet:

    def test_duplicate_path_is_rejected(self, tmp_path):
        processed = ProcessedSet()
        processed.add(str(tmp_path / "a"))

        with pytest.raises(ConsistencyError):
            processed.add(str(tmp_path / "a"))

    def test_same_directory_through_symlink_is_rejected(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real)
        processed = ProcessedSet()
        processed.add(str(real), directory=True)

        with pytest.raises(ConsistencyError):
            processed.add(str(link), directory=True)

    def test_symlinked_file_is_a_separate_path(self, tmp_path):
        real = tmp_path / "real.txt"
        real.write_text("data")
        link = tmp_path / "alias.txt"
        link.symlink_to(real)
        processed = ProcessedSet()
        processed.add(str(real))

        processed.add(str(link))

        assert processed.visited_paths() == {str(real), str(link)}

    def test_visited_paths_keep_traversal_spelling(self, tmp_path):
        processed = ProcessedSet()
        path = str(tmp_path / "x")
        processed.add(path)

        assert processed.visited_paths() == {path}
        assert path in processed


class TestTraverser:

    def test_visits_every_file(self, traverser, handled, source_dir):
        total = traverser.visit(str(source_dir), True, rules())

        assert sorted(handled) == sorted([
            str(source_dir / "a.txt"),
            str(source_dir / "b.log"),
            str(source_dir / "cache" / "d.txt"),
            str(source_dir / "docs" / "c.txt"),
        ])
        assert total == len("alpha") + len("bravo!") + len("charlie") + len("delta")

    def test_file_include_and_exclude(self, traverser, handled, source_dir):
        traverser.visit(str(source_dir), True, rules(includeFiles=[r".*\.txt"], excludeFiles=["d.txt"]))

        assert sorted(handled) == [str(source_dir / "a.txt"), str(source_dir / "docs" / "c.txt")]

    def test_rejected_files_are_not_recorded(self, traverser, source_dir):
        traverser.visit(str(source_dir), True, rules(excludeFiles=[r".*\.log"]))

        assert str(source_dir / "b.log") not in traverser.processed
        assert str(source_dir / "a.txt") in traverser.processed

    def test_excluded_folder_is_skipped_entirely(self, traverser, handled, source_dir):
        traverser.visit(str(source_dir), True, rules(excludeFolders=["cache"]))

        assert str(source_dir / "cache" / "d.txt") not in handled
        assert str(source_dir / "cache") not in traverser.processed

    def test_folder_include_list(self, traverser, handled, source_dir):
        traverser.visit(str(source_dir), True, rules(includeFolders=["docs"]))

        assert str(source_dir / "docs" / "c.txt") in handled
        assert str(source_dir / "cache" / "d.txt") not in handled

    def test_forced_root_ignores_its_own_folder_filters(self, traverser, handled, source_dir):
        total = traverser.visit(str(source_dir), True, rules(includeFolders=["nothing-matches"]))

        # Root is processed, nested folders are filtered
        assert str(source_dir) in traverser.processed
        assert sorted(handled) == [str(source_dir / "a.txt"), str(source_dir / "b.log")]
        assert total == len("alpha") + len("bravo!")

    def test_unforced_root_is_filtered(self, traverser, handled, source_dir):
        total = traverser.visit(str(source_dir), False, rules(excludeFolders=["source"]))

        assert total == 0
        assert handled == []

    def test_file_root_still_uses_file_filters(self, traverser, handled, source_dir):
        path = str(source_dir / "a.txt")

        assert traverser.visit(path, True, rules(excludeFiles=[r"a\.txt"])) == 0
        assert handled == []

    def test_missing_path_is_fatal(self, traverser, tmp_path):
        with pytest.raises(FilesystemAccessError):
            traverser.visit(str(tmp_path / "missing"), True, rules())

    def test_unreadable_directory_is_fatal(self, traverser, tmp_path):
        if os.geteuid() == 0:
            pytest.skip("root can list any directory")
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0)
        try:
            with pytest.raises(FilesystemAccessError):
                traverser.visit(str(locked), True, rules())
        finally:
            locked.chmod(0o755)

    def test_overlapping_roots_abort(self, traverser, source_dir):
        traverser.visit(str(source_dir), True, rules())

        with pytest.raises(ConsistencyError):
            traverser.visit(str(source_dir / "docs"), True, rules())

    def test_symlink_cycle_aborts(self, traverser, source_dir):
        (source_dir / "docs" / "loop").symlink_to(source_dir)

        with pytest.raises(ConsistencyError):
            traverser.visit(str(source_dir), True, rules())

    def test_directory_subtotal_is_reported(self, traverser, source_dir, output):
        traverser.visit(str(source_dir), True, rules(excludeFolders=["cache"]))

        lines = output.getvalue().splitlines()
        assert f"{source_dir / 'docs'} size: 7.0 B" in lines
        assert not any(line.startswith(str(source_dir / "cache")) for line in lines)

    def test_file_symlink_inside_target_is_visited_under_both_names(self, traverser, handled, source_dir):
        (source_dir / "alias.txt").symlink_to(source_dir / "a.txt")

        total = traverser.visit(str(source_dir), True, rules(excludeFolders=["cache", "docs"]))

        assert sorted(handled) == [str(source_dir / "a.txt"), str(source_dir / "alias.txt"),
                                   str(source_dir / "b.log")]
        assert total == 2 * len("alpha") + len("bravo!")
