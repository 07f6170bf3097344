import os
from pathlib import Path

import pytest

from diskusage.models import Entry, EntryKind
from diskusage.walker import discover_dir_entries, walk_tree


def test_walk_yields_root_first(sample_tree: Path) -> None:
    entries: list[Entry] = list(walk_tree(sample_tree, max_workers=4))

    assert entries[0] == Entry(path=str(sample_tree.resolve()), kind=EntryKind.DIRECTORY, parent=None)


def test_walk_finds_every_entry(sample_tree: Path) -> None:
    root: str = str(sample_tree.resolve())
    entries: list[Entry] = list(walk_tree(sample_tree, max_workers=4))

    dirs: set[str] = {e.path for e in entries if e.kind is EntryKind.DIRECTORY}
    files: set[str] = {e.path for e in entries if e.kind is EntryKind.FILE}

    assert dirs == {root, f"{root}/sub", f"{root}/sub/deeper", f"{root}/empty"}
    assert files == {f"{root}/a.txt", f"{root}/sub/b.bin", f"{root}/sub/deeper/c.log"}
    assert len(entries) == len(dirs) + len(files)


def test_walk_sets_parents(sample_tree: Path) -> None:
    for entry in walk_tree(sample_tree, max_workers=2):
        if entry.parent is not None:
            assert entry.parent == os.path.dirname(entry.path)


def test_directory_is_yielded_before_its_contents(sample_tree: Path) -> None:
    seen: set[str] = set()
    for entry in walk_tree(sample_tree, max_workers=4):
        if entry.parent is not None:
            assert entry.parent in seen
        seen.add(entry.path)


def test_symlinks_are_skipped(sample_tree: Path) -> None:
    (sample_tree / "link").symlink_to(sample_tree / "sub")
    (sample_tree / "file-link").symlink_to(sample_tree / "a.txt")

    paths: set[str] = {Path(e.path).name for e in walk_tree(sample_tree, max_workers=2)}

    assert "link" not in paths
    assert "file-link" not in paths


def test_scanning_missing_directory_yields_nothing(tmp_path: Path) -> None:
    assert discover_dir_entries(str(tmp_path / "gone")) == []


def test_walk_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        list(walk_tree(tmp_path / "gone", max_workers=1))


def test_walk_rejects_file_root(sample_tree: Path) -> None:
    with pytest.raises(ValueError):
        list(walk_tree(sample_tree / "a.txt", max_workers=1))
