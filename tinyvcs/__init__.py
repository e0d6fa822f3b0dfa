from tinyvcs.config import Settings
from tinyvcs.models import Commit, ObjectStore, ObjectType, Repository, TreeEntry

__all__ = ["Commit", "ObjectStore", "ObjectType", "Repository", "Settings", "TreeEntry"]
__version__ = "0.1.0"
