import pathlib

import pytest

from tinyvcs.config import Settings
from tinyvcs.errors import AlreadyInitialized, CorruptObject, NotFound, TypeMismatch, Uninitialized
from tinyvcs.models import Commit, ObjectType, Repository


class TestRepository:
    def test_init_repo(self, change_to_tmp_dir):
        repo = Repository.init()
        assert pathlib.Path(".tinyvcs/objects").is_dir()
        assert not pathlib.Path(".tinyvcs/HEAD").exists()
        assert repo.head is None

    def test_init_twice(self, repo, change_to_tmp_dir):
        with pytest.raises(AlreadyInitialized):
            Repository.init(change_to_tmp_dir)

    def test_init_custom_dir(self, change_to_tmp_dir):
        repo = Repository.init(settings=Settings(repo_dir=".meta"))
        assert (change_to_tmp_dir / ".meta" / "objects").is_dir()
        assert repo.settings.is_reserved(".meta")

    def test_open_uninitialized(self, change_to_tmp_dir):
        with pytest.raises(Uninitialized):
            Repository.open()

    def test_open_with_empty_head_file(self, repo, change_to_tmp_dir):
        repo.head_file.write_bytes(b"")
        assert Repository.open(change_to_tmp_dir).head is None

    def test_open_with_garbage_head(self, repo, change_to_tmp_dir):
        repo.head_file.write_bytes(b"not-an-id")
        with pytest.raises(CorruptObject):
            Repository.open(change_to_tmp_dir)

    def test_cat_file(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "file.txt").write_bytes(b"some content")
        oid = repo.hash_object("file.txt")
        assert repo.cat_file(oid) == b"some content"

    def test_cat_file_rejects_tree(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "file.txt").write_text("x")
        with pytest.raises(TypeMismatch):
            repo.cat_file(repo.write_tree())

    def test_scenario(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "a.txt").write_text("hi")
        blob_oid = repo.hash_object("a.txt")
        tree_oid = repo.write_tree()
        assert repo.flatten(tree_oid) == [(blob_oid, pathlib.Path("a.txt"))]

        c1 = repo.commit("first")
        first = repo.get_commit(c1)
        assert first.tree_oid == tree_oid
        assert first.parent_oid is None

        c2 = repo.commit("second")
        second = repo.get_commit(c2)
        assert second.tree_oid == tree_oid
        assert second.parent_oid == c1
        assert [c.oid for c in repo.log(c2)] == [c2, c1]

    def test_head_is_persisted(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "a.txt").write_text("hi")
        oid = repo.commit("first")
        assert repo.head == oid
        assert repo.head_file.read_bytes() == oid.encode()
        assert Repository.open(change_to_tmp_dir).head == oid

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_commit_chain(self, repo, change_to_tmp_dir, count):
        created = []
        for i in range(count):
            (change_to_tmp_dir / "counter").write_text(str(i))
            created.append(repo.commit(f"commit {i}"))

        history = list(repo.log())
        assert len(history) == count
        assert [c.oid for c in history] == created[::-1]
        for newer, older in zip(history, history[1:]):
            assert newer.parent_oid == older.oid
        assert history[-1].parent_oid is None

    def test_same_message_new_parent_new_id(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "a.txt").write_text("hi")
        assert repo.commit("same") != repo.commit("same")

    def test_commit_message_is_stripped(self, repo, change_to_tmp_dir):
        oid = repo.commit("  subject\n\nbody\n  ")
        assert repo.get_commit(oid).message == "subject\n\nbody"

    def test_log_is_lazy(self, repo, change_to_tmp_dir):
        c1 = repo.commit("first")
        repo.commit("second")
        # Drop the root commit; the newest one must still be readable.
        repo.store.path_for(c1).unlink()
        history = repo.log()
        assert next(history).message == "second"
        with pytest.raises(NotFound):
            next(history)

    def test_log_without_commits(self, repo):
        assert list(repo.log()) == []

    def test_log_unknown_start(self, repo):
        with pytest.raises(NotFound):
            list(repo.log("0" * 40))

    def test_log_requires_commit(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "a.txt").write_text("hi")
        with pytest.raises(TypeMismatch):
            list(repo.log(repo.write_tree()))

    def test_read_tree_defaults_to_head(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "a.txt").write_text("hi")
        repo.commit("first")
        (change_to_tmp_dir / "a.txt").write_text("edited")
        (change_to_tmp_dir / "b.txt").write_text("new")
        repo.read_tree()
        assert sorted(p.name for p in change_to_tmp_dir.iterdir()) == [".tinyvcs", "a.txt"]
        assert (change_to_tmp_dir / "a.txt").read_text() == "hi"

    def test_read_tree_without_head(self, repo):
        with pytest.raises(NotFound):
            repo.read_tree()

    def test_read_tree_explicit(self, repo, change_to_tmp_dir):
        (change_to_tmp_dir / "v1.txt").write_text("1")
        tree_v1 = repo.write_tree()
        (change_to_tmp_dir / "v1.txt").unlink()
        (change_to_tmp_dir / "v2.txt").write_text("2")
        repo.read_tree(tree_v1)
        assert (change_to_tmp_dir / "v1.txt").read_text() == "1"
        assert not (change_to_tmp_dir / "v2.txt").exists()


class TestCommitRecord:
    def test_to_bytes(self):
        commit = Commit(tree_oid="t" * 40, parent_oid="p" * 40, message="msg")
        assert commit.to_bytes() == f"tree {'t' * 40}\nparent {'p' * 40}\n\nmsg".encode()

    def test_root_commit_has_no_parent_line(self):
        assert b"parent" not in Commit(tree_oid="t" * 40, message="msg").to_bytes()

    def test_from_bytes(self):
        data = b"tree abc\nparent def\n\nline one\n\nline two"
        commit = Commit.from_bytes(data, oid="xyz")
        assert commit == Commit(oid="xyz", tree_oid="abc", parent_oid="def", message="line one\n\nline two")

    def test_from_bytes_without_tree(self):
        with pytest.raises(CorruptObject):
            Commit.from_bytes(b"parent def\n\nmsg")

    def test_stored_as_commit_type(self, repo, change_to_tmp_dir):
        oid = repo.commit("first")
        assert repo.store.type_of(oid) == ObjectType.COMMIT
