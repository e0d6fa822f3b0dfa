import os
from dataclasses import dataclass, field

from tinyvcs.errors import ConfigError

__all__ = ["Settings"]

DEFAULT_REPO_DIR = ".tinyvcs"
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, kw_only=True)
class Settings:
    """Repository layout and I/O tuning.

    ``reserved`` lists top-level names that snapshots never record and
    restores never delete. The metadata directory is always reserved.
    """

    repo_dir: str = DEFAULT_REPO_DIR
    hash_name: str = "sha1"
    chunk_size: int = DEFAULT_CHUNK_SIZE
    pipe_capacity: int = 16
    reserved: frozenset[str] = field(default_factory=lambda: frozenset({".git"}))

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.pipe_capacity <= 0:
            raise ValueError(f"pipe_capacity must be positive, got {self.pipe_capacity}")
        object.__setattr__(self, "reserved", frozenset(self.reserved) | {self.repo_dir})

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        kwargs = {}
        if repo_dir := environ.get("TINYVCS_DIR"):
            kwargs["repo_dir"] = repo_dir
        if chunk_size := environ.get("TINYVCS_CHUNK_SIZE"):
            try:
                kwargs["chunk_size"] = int(chunk_size)
            except ValueError:
                raise ConfigError(f"TINYVCS_CHUNK_SIZE must be an integer, got {chunk_size!r}") from None
        try:
            return cls(**kwargs)
        except ValueError as exc:
            raise ConfigError(str(exc)) from None

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved
