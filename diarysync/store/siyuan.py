"""
SiYuan kernel store for diarysync.

This module talks to a running SiYuan kernel over its HTTP API and compiles
BlockQuery filters into the kernel's SQL dialect.
"""

import httpx
import logging
import re
from typing import Any, Dict, List, Optional

from ..errors import ExternalStoreError
from ..models import (
    BlockKind,
    BlockQuery,
    ContentBlock,
    DEFAULT_NOTEBOOK_ICON,
    InsertPosition,
    Notebook,
)
from .base import BaseDocumentStore


IAL_PATTERN = re.compile(r'([\w-]+)="([^"]*)"')


def sql_literal(value: str) -> str:
    """Quote a value as an SQL string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def compile_query(query: BlockQuery) -> str:
    """
    Compile a BlockQuery into a SiYuan SQL statement.

    Args:
        query: The structured filter

    Returns:
        A SELECT over `blocks`, joined with `attributes` when an attribute
        filter is present
    """
    columns = "B.*"
    joins = ""
    conditions: List[str] = []

    if query.attribute is not None:
        attr = query.attribute
        columns = "B.*, A.name as attr_name, A.value as attr_value"
        joins = (
            " inner join attributes as A on (A.block_id = B.id"
            f" and A.name = {sql_literal(attr.name)}"
            f" and A.value {attr.op.value} {sql_literal(attr.value)})"
        )

    if query.block_type is not None:
        conditions.append(f"B.type = {sql_literal(query.block_type.value)}")
    if query.hpath is not None:
        conditions.append(f"B.hpath = {sql_literal(query.hpath)}")
    if query.box is not None:
        conditions.append(f"B.box = {sql_literal(query.box)}")
    if query.root_id is not None:
        conditions.append(f"B.root_id = {sql_literal(query.root_id)}")
    if query.name is not None:
        conditions.append(f"B.name = {sql_literal(query.name)}")
    if query.ids is not None:
        id_list = ", ".join(sql_literal(block_id) for block_id in query.ids) or "''"
        conditions.append(f"B.id in ({id_list})")

    sql = f"select {columns} from blocks as B{joins}"
    if conditions:
        sql += " where " + " and ".join(conditions)
    if query.order_by_attribute and query.attribute is not None:
        sql += " order by A.value"
    else:
        sql += " order by B.created"
    if query.limit is not None:
        sql += f" limit {int(query.limit)}"
    return sql


def block_from_row(row: Dict[str, Any]) -> ContentBlock:
    """Convert a row of the `blocks` table into a ContentBlock."""
    attributes = dict(IAL_PATTERN.findall(row.get("ial") or ""))
    attributes.pop("id", None)
    attributes.pop("updated", None)
    if row.get("name"):
        attributes["name"] = row["name"]
    if row.get("attr_name"):
        attributes[row["attr_name"]] = row.get("attr_value") or ""

    return ContentBlock(
        id=row["id"],
        kind=BlockKind.from_code(row.get("type")),
        subtype=row.get("subtype") or "",
        content=row.get("content") or "",
        markdown=row.get("markdown") or "",
        root_id=row.get("root_id") or "",
        parent_id=row.get("parent_id") or None,
        box=row.get("box") or "",
        hpath=row.get("hpath") or "",
        attributes=attributes,
    )


class SiYuanStore(BaseDocumentStore):
    """
    Document store backed by the SiYuan kernel HTTP API.
    """

    def __init__(self, host: str = "http://127.0.0.1:6806", token: str = "",
                 timeout: float = 10.0, client: Optional[httpx.Client] = None):
        """
        Initialize the SiYuan store.

        Args:
            host: Base URL of the SiYuan kernel
            token: API token (Settings > About > API token)
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        self.host = host.rstrip("/")
        headers = {"Authorization": f"Token {token}"} if token else {}
        self.client = client or httpx.Client(timeout=timeout, headers=headers)
        logging.info(f"Initialized SiYuan store for: {self.host}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        self.client.close()

    def _post(self, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call a kernel endpoint and unwrap its `data` field.

        Raises:
            ExternalStoreError: On transport errors, HTTP errors or a non-zero
                response code
        """
        try:
            response = self.client.post(f"{self.host}{endpoint}", json=payload or {})
            response.raise_for_status()
            result = response.json()
        except httpx.RequestError as e:
            raise ExternalStoreError(f"Failed to connect to SiYuan: {e}", endpoint=endpoint) from e
        except httpx.HTTPStatusError as e:
            raise ExternalStoreError(f"SiYuan request failed: {e}", endpoint=endpoint) from e
        except ValueError as e:
            raise ExternalStoreError(f"Invalid response from SiYuan: {e}", endpoint=endpoint) from e

        code = result.get("code", -1)
        if code != 0:
            raise ExternalStoreError(
                f"SiYuan {endpoint} returned code {code}: {result.get('msg', '')}",
                endpoint=endpoint,
                code=code,
            )
        return result.get("data")

    def sql(self, statement: str) -> List[Dict[str, Any]]:
        logging.debug(f"SQL: {statement}")
        return self._post("/api/query/sql", {"stmt": statement}) or []

    def query(self, query: BlockQuery) -> List[ContentBlock]:
        return [block_from_row(row) for row in self.sql(compile_query(query))]

    def get_block_by_id(self, block_id: str) -> Optional[ContentBlock]:
        blocks = self.query(BlockQuery(ids=[block_id], limit=1))
        return blocks[0] if blocks else None

    def get_child_blocks(self, block_id: str) -> List[ContentBlock]:
        children = self._post("/api/block/getChildBlocks", {"id": block_id}) or []
        return [
            ContentBlock(
                id=child["id"],
                kind=BlockKind.from_code(child.get("type")),
                subtype=child.get("subType") or "",
            )
            for child in children
        ]

    def create_document(self, notebook_id: str, path: str, markdown: str = "") -> str:
        return self._post("/api/filetree/createDocWithMd", {
            "notebook": notebook_id,
            "path": path,
            "markdown": markdown,
        })

    def move_block(self, block_id: str, previous_id: Optional[str] = None,
                   parent_id: Optional[str] = None) -> None:
        self._check_move_target(previous_id, parent_id)
        self._post("/api/block/moveBlock", {
            "id": block_id,
            "previousID": previous_id,
            "parentID": parent_id,
        })

    def insert_block(self, document_id: str, markdown: str,
                     position: InsertPosition = InsertPosition.BOTTOM) -> str:
        endpoint = "/api/block/appendBlock" if position == InsertPosition.BOTTOM else "/api/block/prependBlock"
        data = self._post(endpoint, {
            "data": markdown,
            "dataType": "markdown",
            "parentID": document_id,
        })
        try:
            return data[0]["doOperations"][0]["id"]
        except (TypeError, IndexError, KeyError) as e:
            raise ExternalStoreError(f"SiYuan {endpoint} returned no block id", endpoint=endpoint) from e

    def update_block(self, block_id: str, markdown: str) -> None:
        self._post("/api/block/updateBlock", {
            "id": block_id,
            "data": markdown,
            "dataType": "markdown",
        })

    def set_block_attributes(self, block_id: str, attributes: Dict[str, str]) -> None:
        self._post("/api/attr/setBlockAttrs", {"id": block_id, "attrs": attributes})

    def render_path_template(self, template: str) -> str:
        return self._post("/api/template/renderSprig", {"template": template}) or ""

    def get_notebook_config(self, notebook_id: str) -> Dict[str, str]:
        data = self._post("/api/notebook/getNotebookConf", {"notebook": notebook_id}) or {}
        conf = data.get("conf") or {}
        return {"path_template": conf.get("dailyNoteSavePath") or ""}

    def list_notebooks(self) -> List[Notebook]:
        data = self._post("/api/notebook/lsNotebooks") or {}
        return [
            Notebook(
                id=nb["id"],
                name=nb.get("name", ""),
                sort=nb.get("sort", 0),
                icon=nb.get("icon") or DEFAULT_NOTEBOOK_ICON,
                closed=nb.get("closed", False),
            )
            for nb in data.get("notebooks") or []
        ]
