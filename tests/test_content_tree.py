from __future__ import annotations

import os
from pathlib import Path

import pytest

from pkgexplorer.core.content import BytesContent, PhysicalFileContent
from pkgexplorer.core.errors import InvalidArgumentError, InvalidTargetError, NameConflictError
from pkgexplorer.core.parts import PackageFile, PackageFolder
from pkgexplorer.core.tree import ContentTree, TreeChange

from conftest import DEMO_FILES


def _tree(files=None):
    changes: list[TreeChange] = []
    files = DEMO_FILES if files is None else files
    tree = ContentTree.from_entries(
        [(p, BytesContent(b)) for p, b in files.items()],
        listener=changes.append,
    )
    return tree, changes


def _assert_unique_siblings(folder: PackageFolder) -> None:
    names = [c.name for c in folder.children]
    assert len(names) == len(set(names))
    for child in folder.children:
        if isinstance(child, PackageFolder):
            _assert_unique_siblings(child)


def test_add_file_and_folder_report_changes():
    tree, changes = _tree()
    tools = tree.add_folder(tree.root, "tools")
    f = tree.add_file(tools, "install.ps1", BytesContent(b"echo"))

    assert f.path == "tools/install.ps1"
    assert "tools/install.ps1" in tree.enumerate_files().paths()
    assert [c.kind for c in changes] == ["added", "added"]


def test_add_conflicting_names_fail_and_leave_tree_unchanged():
    tree, changes = _tree()
    before = tree.enumerate_files().paths()

    with pytest.raises(NameConflictError, match=r"'lib'"):
        tree.add_folder(tree.root, "lib")
    with pytest.raises(NameConflictError, match=r"'readme.txt'"):
        tree.add_file(tree.find("content"), "readme.txt", BytesContent(b"x"))

    assert tree.enumerate_files().paths() == before
    assert changes == []
    _assert_unique_siblings(tree.root)


def test_add_rejects_names_with_separators():
    tree, _ = _tree()
    with pytest.raises(InvalidArgumentError):
        tree.add_file(tree.root, "a/b.txt", BytesContent(b""))
    with pytest.raises(InvalidArgumentError):
        tree.add_folder(tree.root, "")


def test_add_to_foreign_folder_is_rejected():
    tree, _ = _tree()
    with pytest.raises(InvalidArgumentError, match=r"not part of this package"):
        tree.add_folder(PackageFolder("elsewhere"), "x")


def test_delete_folder_removes_whole_subtree():
    tree, changes = _tree()
    lib = tree.find("lib")
    tree.delete(lib)

    assert tree.enumerate_files().paths() == ["content/readme.txt"]
    assert tree.find("lib/net45/Foo.dll") is None
    assert lib.parent is None
    assert changes[-1] == TreeChange("deleted", lib)


def test_delete_root_is_rejected():
    tree, _ = _tree()
    with pytest.raises(InvalidArgumentError, match=r"root"):
        tree.delete(tree.root)


def test_rename_keeps_position_and_checks_siblings():
    tree, changes = _tree()
    net45 = tree.find("lib/net45")
    foo = tree.find("lib/net45/Foo.dll")
    tree.rename(foo, "Baz.dll")

    assert [c.name for c in net45.children] == ["Baz.dll", "Bar.dll"]
    assert tree.find("lib/net45/Baz.dll") is foo
    assert changes[-1].kind == "renamed"

    with pytest.raises(NameConflictError, match=r"'Bar.dll'"):
        tree.rename(foo, "Bar.dll")


def test_move_reparents_and_guards_cycles():
    tree, changes = _tree()
    readme = tree.find("content/readme.txt")
    tree.move(readme, tree.root)
    assert readme.path == "readme.txt"
    assert changes[-1].kind == "moved"

    lib = tree.find("lib")
    with pytest.raises(InvalidArgumentError, match=r"into itself"):
        tree.move(lib, tree.find("lib/net45"))
    with pytest.raises(InvalidArgumentError, match=r"into itself"):
        tree.move(lib, lib)

    tree.add_file(tree.find("content"), "Foo.dll", BytesContent(b""))
    with pytest.raises(NameConflictError):
        tree.move(tree.find("content/Foo.dll"), tree.find("lib/net45"))
    _assert_unique_siblings(tree.root)


def test_sequence_of_mutations_keeps_siblings_unique():
    tree, _ = _tree()
    for i in range(3):
        folder = tree.add_folder(tree.root, f"f{i}")
        tree.add_file(folder, "a.txt", BytesContent(b"a"))
        with pytest.raises(NameConflictError):
            tree.add_file(folder, "a.txt", BytesContent(b"b"))
    tree.delete(tree.find("f1"))
    tree.add_folder(tree.root, "f1")
    _assert_unique_siblings(tree.root)


def test_add_physical_file_and_folder(tmp_path: Path):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "b.txt").write_text("b", encoding="utf-8")
    (src / "a.txt").write_text("a", encoding="utf-8")
    (src / "sub" / "c.txt").write_text("c", encoding="utf-8")

    tree, _ = _tree({})
    folder = tree.add_physical_folder(tree.root, src)
    assert [c.name for c in folder.children] == ["a.txt", "b.txt", "sub"]
    assert tree.enumerate_files().paths() == ["src/a.txt", "src/b.txt", "src/sub/c.txt"]

    single = tree.add_physical_file(folder, src / "sub" / "c.txt")
    assert isinstance(single.content, PhysicalFileContent)
    assert single.path == "src/c.txt"

    with pytest.raises(NameConflictError):
        tree.add_physical_folder(tree.root, src)
    with pytest.raises(InvalidTargetError):
        tree.add_physical_folder(tree.root, tmp_path / "missing")
    with pytest.raises(InvalidTargetError):
        tree.add_physical_file(tree.root, tmp_path / "missing.txt")


def test_export_writes_hierarchy_and_reuses_directories(tmp_path: Path):
    tree, _ = _tree()
    tree.add_folder(tree.root, "empty")
    (tmp_path / "lib").mkdir()

    written = tree.export(tmp_path)

    assert len(written) == 3
    assert (tmp_path / "lib" / "net45" / "Foo.dll").read_bytes() == DEMO_FILES["lib/net45/Foo.dll"]
    assert (tmp_path / "content" / "readme.txt").read_bytes() == b"hello\n"
    assert (tmp_path / "empty").is_dir()


def test_export_to_missing_directory_fails(tmp_path: Path):
    tree, _ = _tree()
    with pytest.raises(InvalidTargetError, match=r"does not exist"):
        tree.export(tmp_path / "nope")
    assert list(tmp_path.iterdir()) == []


def test_file_parts_open_their_content():
    tree, _ = _tree()
    f = tree.find("content/readme.txt")
    assert isinstance(f, PackageFile)
    with f.open() as fh:
        assert fh.read() == b"hello\n"


def test_move_with_new_name_conflict_leaves_tree_unchanged():
    tree, changes = _tree()
    readme = tree.find("content/readme.txt")
    before = tree.enumerate_files().paths()

    with pytest.raises(NameConflictError, match=r"'Foo.dll'"):
        tree.move(readme, tree.find("lib/net45"), "Foo.dll")

    assert tree.enumerate_files().paths() == before
    assert readme.name == "readme.txt"
    assert changes == []


def test_move_within_same_folder_with_new_name_renames():
    tree, changes = _tree()
    readme = tree.find("content/readme.txt")
    tree.move(readme, tree.find("content"), "README.md")
    assert readme.path == "content/README.md"
    assert [c.kind for c in changes] == ["renamed"]


def test_add_physical_folder_skips_symlinked_directories(tmp_path: Path):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "sub" / "a.txt").write_text("a", encoding="utf-8")
    try:
        os.symlink(src, src / "sub" / "loop", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported here")

    tree, _ = _tree({})
    tree.add_physical_folder(tree.root, src)

    assert tree.enumerate_files().paths() == ["src/sub/a.txt"]
    assert tree.find("src/sub/loop") is None
