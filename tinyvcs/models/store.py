import contextlib
import hashlib
import io
import logging
import os
import pathlib
import re
import tempfile
from typing import BinaryIO, Iterator

from tinyvcs.config import Settings
from tinyvcs.errors import CorruptObject, NotFound, TypeMismatch, Uninitialized
from tinyvcs.models.objects import NULL_BYTE, ObjectType

__all__ = ["ObjectStore"]

logger = logging.getLogger(__name__)

MAX_TAG_LENGTH = 32


class ObjectStore:
    """Content-addressed object files under ``<repo_dir>/objects``.

    Each object file holds the ASCII type tag, a NUL sentinel and the payload.
    The id is the hex digest of those exact bytes, so the same payload stored
    as a blob and as a tree yields two distinct objects.
    """

    def __init__(self, git_folder: os.PathLike, *, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.git_folder = pathlib.Path(git_folder)
        self.objects_folder = self.git_folder / "objects"
        self.oid_length = hashlib.new(self.settings.hash_name).digest_size * 2
        self._oid_pattern = re.compile(rf"[0-9a-f]{{{self.oid_length}}}")

    def _ensure_initialized(self):
        if not self.objects_folder.is_dir():
            raise Uninitialized(self.objects_folder)

    def is_valid_oid(self, oid: str) -> bool:
        return isinstance(oid, str) and self._oid_pattern.fullmatch(oid) is not None

    def path_for(self, oid: str) -> pathlib.Path:
        if not self.is_valid_oid(oid):
            raise NotFound(oid)
        return self.objects_folder / oid

    def exists(self, oid: str) -> bool:
        self._ensure_initialized()
        return self.is_valid_oid(oid) and self.path_for(oid).is_file()

    def put(self, obj_type: ObjectType | str, content: BinaryIO) -> str:
        """Stream ``content`` into the store and return its id."""
        self._ensure_initialized()
        tag = ObjectType(obj_type).tag
        hasher = hashlib.new(self.settings.hash_name)
        header = tag + NULL_BYTE
        hasher.update(header)

        fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=self.objects_folder)
        tmp_path = pathlib.Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(header)
                size = 0
                while chunk := content.read(self.settings.chunk_size):
                    hasher.update(chunk)
                    f.write(chunk)
                    size += len(chunk)
            oid = hasher.hexdigest()
            self._publish(tmp_path, self.objects_folder / oid)
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.debug("Stored %s %s (%d bytes)", tag.decode(), oid, size)
        return oid

    def put_bytes(self, obj_type: ObjectType | str, data: bytes) -> str:
        return self.put(obj_type, io.BytesIO(data))

    @staticmethod
    def _publish(tmp_path: pathlib.Path, dest: pathlib.Path):
        # A hard link fails instead of replacing, so the first writer wins.
        try:
            os.link(tmp_path, dest)
        except FileExistsError:
            logger.debug("Object %s already stored, dropping duplicate", dest.name)

    @contextlib.contextmanager
    def get(self, oid: str, expected_type: ObjectType | str | None = None) -> Iterator[BinaryIO]:
        """Open an object and yield a stream positioned at its payload."""
        self._ensure_initialized()
        path = self.path_for(oid)
        try:
            f = path.open("rb")
        except FileNotFoundError:
            raise NotFound(oid) from None
        with f:
            actual = self._read_tag(f, oid)
            if expected_type is not None and actual != ObjectType(expected_type):
                raise TypeMismatch(oid, str(ObjectType(expected_type)), actual)
            yield f

    @staticmethod
    def _read_tag(f: BinaryIO, oid: str) -> str:
        head = f.read(MAX_TAG_LENGTH + 1)
        tag, sep, _ = head.partition(NULL_BYTE)
        if not sep:
            raise CorruptObject(f"Object {oid} has no type tag")
        f.seek(len(tag) + 1)
        try:
            return tag.decode("ascii")
        except UnicodeDecodeError:
            raise CorruptObject(f"Object {oid} has a non-ASCII type tag") from None

    def read(self, oid: str, expected_type: ObjectType | str | None = None) -> bytes:
        with self.get(oid, expected_type) as f:
            return f.read()

    def type_of(self, oid: str) -> str:
        self._ensure_initialized()
        try:
            with self.path_for(oid).open("rb") as f:
                return self._read_tag(f, oid)
        except FileNotFoundError:
            raise NotFound(oid) from None
