import logging
import os
import pathlib
from typing import Iterator

from tinyvcs.config import Settings
from tinyvcs.errors import AlreadyInitialized, CorruptObject, NotFound, Uninitialized
from tinyvcs.models.objects import Commit, ObjectType, TreeEntry
from tinyvcs.models.store import ObjectStore
from tinyvcs.models.tree import build_tree, flatten_tree, iter_tree
from tinyvcs.models.worktree import restore_tree

__all__ = ["Repository"]

logger = logging.getLogger(__name__)


class Repository:
    """A working directory plus its object store and HEAD pointer.

    HEAD is read once when the repository is opened and rewritten by
    :meth:`commit`. Only one handle should mutate a repository at a time.
    """

    def __init__(self, work_dir: os.PathLike = ".", *, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.work_dir = pathlib.Path(work_dir)
        self.git_folder = self.work_dir / self.settings.repo_dir
        self.head_file = self.git_folder / "HEAD"
        self.store = ObjectStore(self.git_folder, settings=self.settings)
        self._head: str | None = None

    @classmethod
    def init(cls, work_dir: os.PathLike = ".", *, settings: Settings | None = None) -> "Repository":
        repo = cls(work_dir, settings=settings)
        try:
            repo.git_folder.mkdir(parents=True)
        except FileExistsError:
            raise AlreadyInitialized(repo.git_folder) from None
        repo.store.objects_folder.mkdir()
        logger.info("Initialized empty repository in %s", repo.git_folder)
        return repo

    @classmethod
    def open(cls, work_dir: os.PathLike = ".", *, settings: Settings | None = None) -> "Repository":
        repo = cls(work_dir, settings=settings)
        if not repo.git_folder.is_dir():
            raise Uninitialized(repo.git_folder)
        repo._head = repo._load_head()
        return repo

    def _load_head(self) -> str | None:
        try:
            raw = self.head_file.read_bytes()
        except FileNotFoundError:
            return None
        oid = raw.decode("ascii", errors="replace").strip()
        if not oid:
            return None
        if not self.store.is_valid_oid(oid):
            raise CorruptObject(f"HEAD does not hold an object id: {raw!r}")
        return oid

    @property
    def head(self) -> str | None:
        return self._head

    def set_head(self, oid: str):
        self.head_file.write_bytes(oid.encode("ascii"))
        self._head = oid

    def hash_object(self, path: os.PathLike) -> str:
        with pathlib.Path(path).open("rb") as f:
            return self.store.put(ObjectType.BLOB, f)

    def cat_file(self, oid: str, expected_type: ObjectType | str | None = ObjectType.BLOB) -> bytes:
        return self.store.read(oid, expected_type)

    def write_tree(self) -> str:
        return build_tree(self.store, self.work_dir)

    def ls_tree(self, oid: str) -> list[TreeEntry]:
        return iter_tree(self.store, oid)

    def flatten(self, tree_oid: str) -> list[tuple[str, pathlib.Path]]:
        return flatten_tree(self.store, tree_oid, ".")

    def read_tree(self, tree_oid: str | None = None) -> list[pathlib.Path]:
        """Materialize ``tree_oid``, or the tree of HEAD when omitted."""
        if tree_oid is None:
            if self.head is None:
                raise NotFound("HEAD")
            tree_oid = self.get_commit(self.head).tree_oid
        return restore_tree(self.store, tree_oid, self.work_dir)

    def get_commit(self, oid: str) -> Commit:
        return Commit.from_bytes(self.store.read(oid, ObjectType.COMMIT), oid=oid)

    def commit(self, message: str) -> str:
        commit = Commit(
            tree_oid=self.write_tree(),
            parent_oid=self.head,
            message=message.strip(),
        )
        oid = self.store.put_bytes(ObjectType.COMMIT, commit.to_bytes())
        self.set_head(oid)
        logger.info("Committed %s (tree %s, parent %s)", oid, commit.tree_oid, commit.parent_oid)
        return oid

    def log(self, start_oid: str | None = None) -> Iterator[Commit]:
        """Yield commits from ``start_oid`` (default HEAD) back to the root."""
        oid = start_oid or self.head
        while oid:
            commit = self.get_commit(oid)
            yield commit
            oid = commit.parent_oid
