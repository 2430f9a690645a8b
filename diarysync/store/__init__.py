"""Document store backends."""

from .base import BaseDocumentStore
from .mock import MockDocumentStore
from .siyuan import SiYuanStore

__all__ = ["BaseDocumentStore", "MockDocumentStore", "SiYuanStore"]
