import logging
import os
import pathlib
import shutil

from tinyvcs.models.objects import ObjectType
from tinyvcs.models.store import ObjectStore
from tinyvcs.models.tree import flatten_tree

__all__ = ["clear_worktree", "restore_tree"]

logger = logging.getLogger(__name__)


def clear_worktree(store: ObjectStore, root: os.PathLike):
    """Delete every top-level entry of ``root`` except reserved names."""
    root = pathlib.Path(root)
    for entry in root.iterdir():
        if store.settings.is_reserved(entry.name):
            continue
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def restore_tree(store: ObjectStore, tree_oid: str, root: os.PathLike = ".") -> list[pathlib.Path]:
    """Replace the contents of ``root`` with the snapshot ``tree_oid``.

    The tree is flattened before anything is deleted, so a missing or
    malformed tree leaves ``root`` untouched. Failures after that point leave
    a partially restored directory.
    """
    root = pathlib.Path(root)
    files = flatten_tree(store, tree_oid, root)
    clear_worktree(store, root)

    written = []
    for oid, path in files:
        path.parent.mkdir(parents=True, exist_ok=True)
        with store.get(oid, ObjectType.BLOB) as src, path.open("wb") as dst:
            shutil.copyfileobj(src, dst, store.settings.chunk_size)
        logger.debug("Restored %s -> %s", oid, path)
        written.append(path)
    return written
