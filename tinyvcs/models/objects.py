import os
from dataclasses import dataclass
from enum import StrEnum, auto

from tinyvcs.errors import CorruptObject, CorruptTree

__all__ = ["ObjectType", "TreeEntry", "Commit", "NULL_BYTE"]

NULL_BYTE = b"\x00"


class ObjectType(StrEnum):
    BLOB = auto()
    TREE = auto()
    COMMIT = auto()

    @property
    def tag(self) -> bytes:
        return self.value.encode("ascii")


@dataclass(frozen=True, kw_only=True)
class TreeEntry:
    name: str
    kind: str
    oid: str

    def to_bytes(self) -> bytes:
        return f"{self.kind} ".encode("ascii") + os.fsencode(self.name) + NULL_BYTE + self.oid.encode("ascii")

    @classmethod
    def from_bytes(cls, data: bytes) -> "TreeEntry":
        head, sep, oid = data.partition(NULL_BYTE)
        kind, space, name = head.partition(b" ")
        if not sep or not space:
            raise CorruptTree(f"Malformed tree entry: {data!r}")
        try:
            return cls(name=os.fsdecode(name), kind=kind.decode("ascii"), oid=oid.decode("ascii"))
        except UnicodeDecodeError as exc:
            raise CorruptTree(f"Malformed tree entry: {data!r}") from exc


@dataclass(frozen=True, kw_only=True)
class Commit:
    oid: str = ""
    tree_oid: str
    parent_oid: str | None = None
    message: str

    def to_bytes(self) -> bytes:
        lines = [f"tree {self.tree_oid}"]
        if self.parent_oid:
            lines.append(f"parent {self.parent_oid}")
        lines.append("")
        lines.append(self.message)
        return "\n".join(lines).encode()

    @classmethod
    def from_bytes(cls, data: bytes, *, oid: str = "") -> "Commit":
        text = data.decode(errors="replace")
        header, _, message = text.partition("\n\n")
        fields = {}
        for line in header.splitlines():
            key, _, value = line.partition(" ")
            fields[key] = value
        if "tree" not in fields:
            raise CorruptObject(f"Commit {oid or '<unsaved>'} has no tree")
        return cls(
            oid=oid,
            tree_oid=fields["tree"],
            parent_oid=fields.get("parent") or None,
            message=message,
        )
