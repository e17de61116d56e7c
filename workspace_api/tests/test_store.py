"""Tests for WorkspaceStore file operations."""

import os

import pytest

from workspace_api.errors import BadRequestError, NotFoundError, PathEscapeError, WorkspaceIOError
from workspace_api.workspace import PathResolver, WorkspaceStore, sanitize_filename


class TestListTree:
    """Test recursive listing."""

    def test_bootstraps_missing_root(self, tmp_path):
        root = tmp_path / "fresh"
        store = WorkspaceStore(PathResolver(root))

        tree = store.list_tree()

        assert root.is_dir()
        assert tree.kind == "directory"
        assert tree.path == ""
        assert tree.children == []

    def test_directories_first_then_by_name(self, store, workspace_root):
        (workspace_root / "b.txt").write_text("b")
        (workspace_root / "a.txt").write_text("a")
        (workspace_root / "zdir").mkdir()
        (workspace_root / "adir").mkdir()
        (workspace_root / "adir" / "inner.py").write_text("")

        tree = store.list_tree()

        assert [(n.name, n.kind) for n in tree.children] == [
            ("adir", "directory"),
            ("zdir", "directory"),
            ("a.txt", "file"),
            ("b.txt", "file"),
        ]
        adir = tree.children[0]
        assert adir.path == "adir"
        assert [(n.name, n.path) for n in adir.children] == [("inner.py", "adir/inner.py")]
        assert tree.children[2].children is None

    def test_subdirectory_listing(self, store, workspace_root):
        (workspace_root / "pkg" / "sub").mkdir(parents=True)
        tree = store.list_tree("pkg")
        assert tree.name == "pkg"
        assert tree.path == "pkg"
        assert [n.name for n in tree.children] == ["sub"]

    def test_missing_directory(self, store):
        with pytest.raises(NotFoundError):
            store.list_tree("nope")

    def test_listing_a_file_is_rejected(self, store, workspace_root):
        (workspace_root / "f.txt").write_text("x")
        with pytest.raises(BadRequestError):
            store.list_tree("f.txt")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlinked_directories_are_not_descended(self, store, workspace_root):
        (workspace_root / "real").mkdir()
        (workspace_root / "real" / "x.txt").write_text("x")
        os.symlink(workspace_root / "real", workspace_root / "alias")

        tree = store.list_tree()

        alias = next(n for n in tree.children if n.name == "alias")
        assert alias.kind == "file"
        assert alias.children is None


class TestReadWrite:
    """Test read/write round trips."""

    @pytest.mark.parametrize(
        "content",
        [b"", b"hello world\n", bytes(range(256)), "héllo wörld ✓".encode("utf-8")],
    )
    def test_round_trip(self, store, content):
        store.write_file("data/blob.bin", content)
        assert store.read_file("data/blob.bin") == content

    def test_write_creates_parents_and_overwrites(self, store, workspace_root):
        store.write_file("a/b/c.txt", "first version that is long")
        store.write_file("a/b/c.txt", "second")
        assert (workspace_root / "a" / "b" / "c.txt").read_text() == "second"

    def test_read_missing_file(self, store):
        with pytest.raises(NotFoundError):
            store.read_file("missing.txt")

    def test_read_directory_is_rejected(self, store, workspace_root):
        (workspace_root / "dir").mkdir()
        with pytest.raises(BadRequestError, match="Not a file"):
            store.read_file("dir")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_read_link_to_directory_is_rejected(self, store, workspace_root):
        (workspace_root / "real").mkdir()
        os.symlink(workspace_root / "real", workspace_root / "alias")
        with pytest.raises(BadRequestError):
            store.read_file("alias")

    def test_write_over_directory_is_io_error(self, store, workspace_root):
        (workspace_root / "dir").mkdir()
        with pytest.raises(WorkspaceIOError):
            store.write_file("dir", "x")

    def test_escape_never_touches_filesystem(self, store, workspace_root):
        with pytest.raises(PathEscapeError):
            store.write_file("../escaped.txt", "x")
        assert not (workspace_root.parent / "escaped.txt").exists()


class TestDeleteAndMkdir:
    """Test delete_file and make_directory."""

    def test_delete_file(self, store, workspace_root):
        store.write_file("x.txt", "x")
        store.delete_file("x.txt")
        assert not (workspace_root / "x.txt").exists()

    def test_delete_directory_recursively(self, store, workspace_root):
        store.write_file("d/e/f.txt", "x")
        store.delete_file("d")
        assert not (workspace_root / "d").exists()

    def test_delete_missing(self, store):
        with pytest.raises(NotFoundError):
            store.delete_file("ghost.txt")

    def test_delete_root_is_refused(self, store, workspace_root):
        with pytest.raises(BadRequestError):
            store.delete_file("")
        with pytest.raises(BadRequestError):
            store.delete_file("a/..")
        assert workspace_root.is_dir()

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_delete_link_to_directory_keeps_target(self, store, workspace_root):
        (workspace_root / "real").mkdir()
        (workspace_root / "real" / "keep.txt").write_text("keep")
        os.symlink(workspace_root / "real", workspace_root / "alias")

        store.delete_file("alias")

        assert not os.path.lexists(workspace_root / "alias")
        assert (workspace_root / "real" / "keep.txt").read_text() == "keep"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_delete_link_to_file_keeps_target(self, store, workspace_root):
        (workspace_root / "target.txt").write_text("t")
        os.symlink(workspace_root / "target.txt", workspace_root / "link.txt")

        store.delete_file("link.txt")

        assert not os.path.lexists(workspace_root / "link.txt")
        assert (workspace_root / "target.txt").read_text() == "t"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_delete_dangling_link(self, store, workspace_root):
        os.symlink(workspace_root / "gone", workspace_root / "dangling")

        store.delete_file("dangling")

        assert not os.path.lexists(workspace_root / "dangling")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_delete_link_pointing_outside_root(self, store, workspace_root, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("s")
        os.symlink(outside, workspace_root / "out")

        store.delete_file("out")

        assert not os.path.lexists(workspace_root / "out")
        assert (outside / "secret.txt").read_text() == "s"

    def test_delete_through_escaping_parent_is_refused(self, store):
        with pytest.raises(PathEscapeError):
            store.delete_file("../ws-sibling/x.txt")

    def test_make_directory_is_idempotent(self, store, workspace_root):
        store.make_directory("x/y")
        store.make_directory("x/y")
        assert (workspace_root / "x" / "y").is_dir()
        assert os.listdir(workspace_root / "x") == ["y"]

    def test_make_directory_over_file(self, store, workspace_root):
        (workspace_root / "taken").write_text("x")
        with pytest.raises(WorkspaceIOError):
            store.make_directory("taken")


class TestUploads:
    """Test upload name sanitization and storage."""

    @pytest.mark.parametrize(
        "given,expected",
        [
            ("report.pdf", "report.pdf"),
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\me\\notes.txt", "notes.txt"),
            ("my file (1).txt", "my_file__1_.txt"),
            ("script;rm -rf.sh", "script_rm_-rf.sh"),
        ],
    )
    def test_sanitize_filename(self, given, expected):
        assert sanitize_filename(given) == expected

    @pytest.mark.parametrize("given", ["", None, "..", "dir/", "."])
    def test_sanitize_falls_back_to_generated_name(self, given):
        assert sanitize_filename(given).startswith("upload_")

    def test_store_uploaded_writes_under_root(self, store, workspace_root):
        name = store.store_uploaded("../nested/data.csv", b"a,b\n1,2\n")
        assert name == "data.csv"
        assert (workspace_root / "data.csv").read_bytes() == b"a,b\n1,2\n"
        assert not (workspace_root.parent / "nested").exists()
