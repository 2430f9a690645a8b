"""
diarysync: daily notes and reservations for SiYuan notebooks.

Resolves each notebook's daily document, moves content into it and keeps a
rendered summary of scheduled blocks in sync.
"""

__version__ = "0.1.0"
__author__ = "diarysync Project"

# Import main components
from .config import ConfigManager, DiarySettings, ListItemPolicy, NotebookSort
from .errors import DiarySyncError, ExternalStoreError, NotFoundError, PolicyViolation, UnknownVariant
from .models import BlockKind, ContentBlock, Notebook, ReservationItem, SyncRequest
from .store import BaseDocumentStore, MockDocumentStore, SiYuanStore
from .service import DiaryContext

__all__ = [
    "ConfigManager",
    "DiarySettings",
    "ListItemPolicy",
    "NotebookSort",
    "DiarySyncError",
    "ExternalStoreError",
    "NotFoundError",
    "PolicyViolation",
    "UnknownVariant",
    "BlockKind",
    "ContentBlock",
    "Notebook",
    "ReservationItem",
    "SyncRequest",
    "BaseDocumentStore",
    "MockDocumentStore",
    "SiYuanStore",
    "DiaryContext",
]
