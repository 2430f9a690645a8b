"""
Daily document lookup and creation.

Resolution is a plain check-then-create against the store. Two callers that
resolve the same notebook concurrently can both miss and both create a
document; nothing here serializes them.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..models import BlockKind, BlockQuery, ContentBlock, Notebook
from ..store import BaseDocumentStore


def block_url(block_id: str) -> str:
    """Deep link that opens a block in the SiYuan client."""
    return f"siyuan://blocks/{block_id}"


class DiaryLocator:
    """
    Get-or-create access to the daily document of a notebook.
    """

    def __init__(self, store: BaseDocumentStore):
        self.store = store

    def find_documents(self, hpath: str, notebook: Optional[Notebook] = None) -> List[ContentBlock]:
        """
        Find documents at a hierarchical path.

        Args:
            hpath: Document path to look for
            notebook: Restrict the lookup to this notebook when given

        Returns:
            Matching documents in creation order
        """
        query = BlockQuery(block_type=BlockKind.DOCUMENT, hpath=hpath)
        if notebook is not None:
            query.box = notebook.id
        return self.store.query(query)

    def resolve(self, notebook: Notebook) -> str:
        """
        Return the id of today's daily document, creating it if absent.

        Args:
            notebook: Notebook whose daily_note_path has been resolved

        Returns:
            The document id
        """
        if not notebook.daily_note_path:
            raise ValueError(f"Daily note path of notebook {notebook.name} is not resolved")

        docs = self.find_documents(notebook.daily_note_path, notebook)
        if docs:
            return docs[0].id
        return self.create_diary(notebook)

    def create_diary(self, notebook: Notebook) -> str:
        logging.info(f"Try to create: {notebook.name} {notebook.daily_note_path}")
        doc_id = self.store.create_document(notebook.id, notebook.daily_note_path, "")
        logging.info(f"Create new diary {doc_id}")
        return doc_id

    def diary_status(self, notebooks: Iterable[Notebook]) -> Dict[str, bool]:
        """
        Report which notebooks already have today's diary.

        One unscoped lookup is made per distinct daily path.

        Returns:
            Mapping of notebook id to True for notebooks with a diary
        """
        hpaths = []
        for notebook in notebooks:
            if notebook.daily_note_path and notebook.daily_note_path not in hpaths:
                hpaths.append(notebook.daily_note_path)

        status: Dict[str, bool] = {}
        count = 0
        for hpath in hpaths:
            docs = self.find_documents(hpath)
            for doc in docs:
                status[doc.box] = True
            if docs:
                count += len(docs)
                logging.info(f"{hpath}: {len(docs)} diaries")
        logging.info(f"Diaries for today: {count}")
        return status
