import io
import logging
import os
import pathlib
from collections.abc import Sequence
from typing import BinaryIO, Iterator

from tinyvcs.errors import CorruptTree, InvalidTree
from tinyvcs.models.framing import frame, iter_frames, pack_u64, read_u64
from tinyvcs.models.objects import ObjectType, TreeEntry
from tinyvcs.models.pipe import stream_from
from tinyvcs.models.store import ObjectStore

__all__ = [
    "encode_tree",
    "iter_encode_tree",
    "decode_tree",
    "read_tree_entries",
    "iter_tree",
    "build_tree",
    "flatten_tree",
]

logger = logging.getLogger(__name__)


def iter_encode_tree(entries: Sequence[TreeEntry]) -> Iterator[bytes]:
    yield pack_u64(len(entries))
    for entry in entries:
        yield frame(entry.to_bytes())


def encode_tree(entries: Sequence[TreeEntry]) -> bytes:
    return b"".join(iter_encode_tree(entries))


def read_tree_entries(stream: BinaryIO) -> list[TreeEntry]:
    count = read_u64(stream, what="entry count")
    entries = [TreeEntry.from_bytes(payload) for payload in iter_frames(stream, count)]
    if stream.read(1):
        raise CorruptTree(f"Trailing data after {count} tree entries")
    return entries


def decode_tree(data: bytes) -> list[TreeEntry]:
    return read_tree_entries(io.BytesIO(data))


def iter_tree(store: ObjectStore, oid: str) -> list[TreeEntry]:
    with store.get(oid, ObjectType.TREE) as f:
        return read_tree_entries(f)


def build_tree(store: ObjectStore, directory: os.PathLike = ".") -> str:
    """Snapshot ``directory`` recursively and return the root tree id.

    Subtrees and blobs are stored before the tree that lists them. Entries
    keep the order ``os.scandir`` returns them in. Names reserved by the
    store settings are skipped at every depth.
    """
    dir_path = pathlib.Path(directory)
    entries = []
    with os.scandir(dir_path) as it:
        for entry in it:
            if store.settings.is_reserved(entry.name):
                continue
            if entry.is_dir(follow_symlinks=False):
                oid = build_tree(store, entry.path)
                entries.append(TreeEntry(name=entry.name, kind=ObjectType.TREE, oid=oid))
            elif entry.is_file():
                with open(entry.path, "rb") as f:
                    oid = store.put(ObjectType.BLOB, f)
                entries.append(TreeEntry(name=entry.name, kind=ObjectType.BLOB, oid=oid))
            else:
                logger.warning("Skipping %s: not a regular file or directory", entry.path)

    with stream_from(lambda: iter_encode_tree(entries), capacity=store.settings.pipe_capacity) as pipe:
        tree_oid = store.put(ObjectType.TREE, pipe)
    logger.debug("Wrote tree %s for %s (%d entries)", tree_oid, dir_path, len(entries))
    return tree_oid


def _check_entry(store: ObjectStore, entry: TreeEntry, tree_oid: str):
    name = entry.name
    if not name or name in (".", ".."):
        raise InvalidTree(f"Tree {tree_oid} has an entry named {name!r}")
    if store.settings.is_reserved(name):
        raise InvalidTree(f"Tree {tree_oid} has an entry with reserved name {name!r}")
    if "/" in name or os.sep in name or (os.altsep and os.altsep in name):
        raise InvalidTree(f"Tree {tree_oid} has an entry with a path separator: {name!r}")
    if entry.kind not in (ObjectType.BLOB, ObjectType.TREE):
        raise InvalidTree(f"Tree {tree_oid} has entry {name!r} of unexpected kind {entry.kind!r}")


def flatten_tree(
    store: ObjectStore, tree_oid: str, base_path: os.PathLike = "."
) -> list[tuple[str, pathlib.Path]]:
    """Return ``(blob_oid, path)`` for every file below ``tree_oid``, depth first.

    Raises :class:`InvalidTree` for entry names that could escape ``base_path``
    or land in a reserved directory such as the repository metadata.
    """
    base = pathlib.Path(base_path)
    files = []
    for entry in iter_tree(store, tree_oid):
        _check_entry(store, entry, tree_oid)
        path = base / entry.name
        if entry.kind == ObjectType.BLOB:
            files.append((entry.oid, path))
        else:
            files.extend(flatten_tree(store, entry.oid, path))
    return files

