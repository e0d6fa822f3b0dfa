from tinyvcs.models.objects import Commit, ObjectType, TreeEntry
from tinyvcs.models.repository import Repository
from tinyvcs.models.store import ObjectStore

__all__ = ["Commit", "ObjectStore", "ObjectType", "Repository", "TreeEntry"]
