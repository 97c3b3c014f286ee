"""Database table definitions for documents, blocks, signatures, comments and versions"""

from datetime import datetime
from typing import Any, List
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


class DocumentRow(SQLModel, table=True):
    """A document record; its blocks are replaced wholesale on every save"""
    __tablename__ = "documents"
    id: str = Field(..., primary_key=True, max_length=32)
    owner_id: str = Field(..., index=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    readers: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class BlockRow(SQLModel, table=True):
    """A positioned text block. Block ids are scoped to their document."""
    __tablename__ = "blocks"
    document_id: str = Field(..., foreign_key="documents.id", primary_key=True)
    id: str = Field(..., primary_key=True, max_length=32)
    z_index: int = Field(..., nullable=False, description="Insertion order; higher draws on top")
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    x: float = Field(..., nullable=False)
    y: float = Field(..., nullable=False)
    width: float = Field(..., nullable=False)
    height: float = Field(..., nullable=False)


class SignatureRow(SQLModel, table=True):
    __tablename__ = "signatures"
    id: str = Field(..., primary_key=True, max_length=32)
    document_id: str = Field(..., foreign_key="documents.id", index=True, nullable=False)
    signer_name: str = Field(..., sa_column=Column(Text, nullable=False))
    signer_id: str = Field(..., nullable=False)
    signed_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class CommentRow(SQLModel, table=True):
    __tablename__ = "comments"
    id: str = Field(..., primary_key=True, max_length=32)
    document_id: str = Field(..., foreign_key="documents.id", index=True, nullable=False)
    author_id: str = Field(..., nullable=False)
    content: str = Field(..., sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class DocumentVersionRow(SQLModel, table=True):
    """Immutable snapshot of a document's title and ordered blocks at a prior save."""
    __tablename__ = "document_versions"
    __table_args__ = (UniqueConstraint("document_id", "version_num", name="uq_docver_doc_num"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    document_id: str = Field(..., foreign_key="documents.id", index=True, nullable=False)
    version_num: int = Field(..., nullable=False, description="Monotonically increasing per-document version number")
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    blocks: List[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
