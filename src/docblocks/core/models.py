"""Domain models: documents, positioned text blocks, signatures, comments and versions"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from docblocks.core.utils.ids import new_id


class Position(BaseModel):
    """Top-left corner of a block; may sit outside the visible canvas."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)
    x: float
    y: float


class Size(BaseModel):
    """Block extent. Bounds are checked by the editor against min_block_size."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)
    width: float
    height: float


class Block(BaseModel):
    """A positioned, sized, editable unit of text within a document"""
    id: str = Field(default_factory=new_id)
    content: str = ""
    position: Position
    size: Size


class Document(BaseModel):
    """An owned, ordered collection of blocks. List order is z-order (last drawn on top)."""
    id: str = Field(default_factory=new_id)
    owner_id: str
    title: str
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    readers: list[str] = Field(default_factory=list)
    blocks: list[Block] = Field(default_factory=list)

    def block_index(self, block_id: str) -> Optional[int]:
        """Return the z-order index of block_id, or None if it is not in this document."""
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        return None

    def can_read(self, subject_id: str) -> bool:
        return subject_id == self.owner_id or subject_id in self.readers


class DocumentSummary(BaseModel):
    """Listing row for a user's documents."""
    id: str
    title: str
    owner_id: str
    block_count: int
    updated_at: datetime


class Signature(BaseModel):
    id: str = Field(default_factory=new_id)
    document_id: str
    signer_name: str
    signer_id: str
    signed_at: datetime = Field(default_factory=datetime.now)


class Comment(BaseModel):
    id: str = Field(default_factory=new_id)
    document_id: str
    author_id: str
    content: str
    created_at: datetime = Field(default_factory=datetime.now)


class DocumentVersion(BaseModel):
    """Immutable snapshot of a Document at a previously saved state."""
    model_config = ConfigDict(frozen=True)
    document_id: str
    version_num: int = Field(..., ge=1, description="Monotonically increasing per-document version number")
    title: str
    hash: str
    blocks: list[Block]
    created_at: datetime = Field(default_factory=datetime.now)
