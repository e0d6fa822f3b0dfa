__all__ = [
    "TinyVcsError",
    "Uninitialized",
    "AlreadyInitialized",
    "NotFound",
    "TypeMismatch",
    "CorruptObject",
    "CorruptTree",
    "InvalidTree",
    "ConfigError",
]


class TinyVcsError(Exception):
    """Base class for every error the repository core raises."""


class Uninitialized(TinyVcsError):
    def __init__(self, path):
        super().__init__(f"Not a tinyvcs repository (missing {path})")
        self.path = path


class AlreadyInitialized(TinyVcsError):
    def __init__(self, path):
        super().__init__(f"Repository already exists at {path}")
        self.path = path


class NotFound(TinyVcsError):
    def __init__(self, oid: str):
        super().__init__(f"Object not found: {oid}")
        self.oid = oid


class TypeMismatch(TinyVcsError):
    def __init__(self, oid: str, expected: str, actual: str):
        super().__init__(f"Object {oid} is a {actual}, expected {expected}")
        self.oid = oid
        self.expected = expected
        self.actual = actual


class CorruptObject(TinyVcsError):
    pass


class CorruptTree(TinyVcsError):
    pass


class InvalidTree(TinyVcsError):
    pass

class ConfigError(TinyVcsError):
    pass

