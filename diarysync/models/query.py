"""
Structured block queries.

Every store implementation understands BlockQuery: the SiYuan store compiles
it into SQL, the mock store evaluates it in memory.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from .canonical import BlockKind


class Comparison(str, Enum):
    EQ = "="
    GE = ">="


class AttributeFilter(BaseModel):
    """Join condition on the block-to-attribute relation."""

    name: str = Field(..., description="Attribute name, e.g. 'custom-reservation'")
    op: Comparison = Field(Comparison.EQ, description="Comparison applied to the value")
    value: str = Field(..., description="Right-hand side of the comparison")

    def matches(self, actual: Optional[str]) -> bool:
        if actual is None:
            return False
        if self.op == Comparison.GE:
            return actual >= self.value
        return actual == self.value


class BlockQuery(BaseModel):
    """A read-only filter over the store's blocks. All set fields must match."""

    block_type: Optional[BlockKind] = None
    hpath: Optional[str] = None
    box: Optional[str] = None
    root_id: Optional[str] = None
    name: Optional[str] = None
    ids: Optional[List[str]] = None
    attribute: Optional[AttributeFilter] = None

    order_by_attribute: bool = Field(
        False,
        description="Order ascending by the joined attribute value"
    )

    limit: Optional[int] = None
