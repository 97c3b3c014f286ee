from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from docblocks.core.models import (
    Block, Comment, Document, DocumentVersion, Position, Signature, Size,
)
from docblocks.core.utils.hashing import document_hash
from docblocks.crud.repo import DocumentStore
from docblocks.crud.tables import (
    BlockRow, CommentRow, DocumentRow, DocumentVersionRow, SignatureRow,
)
from docblocks.crud.versioning import get_version, list_versions, save_version
from docblocks.errors import StorageError


logger = logging.getLogger(__name__)


def _block_rows(session: Session, document_id: str) -> list[BlockRow]:
    return list(session.exec(
        select(BlockRow)
        .where(BlockRow.document_id == document_id)
        .order_by(BlockRow.z_index.asc())
    ).all())


def _row_to_block(r: BlockRow) -> Block:
    return Block(
        id=r.id,
        content=r.content,
        position=Position(x=r.x, y=r.y),
        size=Size(width=r.width, height=r.height),
    )


def _row_to_doc(r: DocumentRow, blocks: list[BlockRow]) -> Document:
    return Document(
        id=r.id,
        owner_id=r.owner_id,
        title=r.title,
        created_at=r.created_at,
        updated_at=r.updated_at,
        readers=list(r.readers or []),
        blocks=[_row_to_block(b) for b in blocks],
    )


def _row_to_version(r: DocumentVersionRow) -> DocumentVersion:
    return DocumentVersion(
        document_id=r.document_id,
        version_num=r.version_num,
        title=r.title,
        hash=r.hash,
        blocks=[Block(**b) for b in (r.blocks or [])],
        created_at=r.created_at,
    )


class SQLStore(DocumentStore):
    """SQLModel-backed store. Each call runs in its own session and transaction."""

    def __init__(self, engine: Engine, max_versions: int = 10):
        self.engine = engine
        self.max_versions = max_versions

    @contextmanager
    def _session(self):
        """Yield a session; roll back and raise StorageError on any engine failure."""
        with Session(self.engine) as session:
            try:
                yield session
            except SQLAlchemyError as e:
                session.rollback()
                logger.warning("Storage operation failed: %s", e)
                raise StorageError(f"Storage failure: {e}") from e

    def get(self, document_id: str) -> Document | None:
        with self._session() as session:
            row = session.get(DocumentRow, document_id)
            return _row_to_doc(row, _block_rows(session, row.id)) if row else None

    def put(self, document: Document) -> str:
        new_hash = document_hash(document)
        with self._session() as session:
            row = session.get(DocumentRow, document.id)
            if row is not None and row.hash == new_hash:
                return "unchanged"

            if row is not None:
                existing = _block_rows(session, row.id)
                save_version(session, row, existing, self.max_versions)
                for b in existing:
                    session.delete(b)
                session.flush()
                row.title = document.title
                row.hash = new_hash
                row.readers = list(document.readers)
                row.updated_at = datetime.now()
                status = "updated"
            else:
                row = DocumentRow(
                    id=document.id,
                    owner_id=document.owner_id,
                    title=document.title,
                    hash=new_hash,
                    readers=list(document.readers),
                    created_at=document.created_at,
                    updated_at=document.updated_at,
                )
                status = "created"
            session.add(row)

            for z, b in enumerate(document.blocks):
                session.add(BlockRow(
                    document_id=document.id,
                    id=b.id,
                    z_index=z,
                    content=b.content,
                    x=b.position.x,
                    y=b.position.y,
                    width=b.size.width,
                    height=b.size.height,
                ))
            session.commit()
            return status

    def delete(self, document_id: str) -> bool:
        with self._session() as session:
            row = session.get(DocumentRow, document_id)
            if row is None:
                return False
            for model in (BlockRow, SignatureRow, CommentRow, DocumentVersionRow):
                for child in session.exec(select(model).where(model.document_id == document_id)).all():
                    session.delete(child)
            session.flush()
            session.delete(row)
            session.commit()
            return True

    def list_by_owner(self, owner_id: str) -> list[Document]:
        with self._session() as session:
            rows = session.exec(
                select(DocumentRow)
                .where(DocumentRow.owner_id == owner_id)
                .order_by(DocumentRow.updated_at.desc())
            ).all()
            return [_row_to_doc(r, _block_rows(session, r.id)) for r in rows]

    def add_signature(self, signature: Signature) -> Signature:
        with self._session() as session:
            session.add(SignatureRow(**signature.model_dump()))
            session.commit()
        return signature

    def list_signatures(self, document_id: str) -> list[Signature]:
        with self._session() as session:
            rows = session.exec(
                select(SignatureRow)
                .where(SignatureRow.document_id == document_id)
                .order_by(SignatureRow.signed_at.asc())
            ).all()
            return [Signature.model_validate(r.model_dump()) for r in rows]

    def add_comment(self, comment: Comment) -> Comment:
        with self._session() as session:
            session.add(CommentRow(**comment.model_dump()))
            session.commit()
        return comment

    def list_comments(self, document_id: str) -> list[Comment]:
        with self._session() as session:
            rows = session.exec(
                select(CommentRow)
                .where(CommentRow.document_id == document_id)
                .order_by(CommentRow.created_at.asc())
            ).all()
            return [Comment.model_validate(r.model_dump()) for r in rows]

    def list_versions(self, document_id: str) -> list[DocumentVersion]:
        with self._session() as session:
            return [_row_to_version(v) for v in list_versions(session, document_id)]

    def get_version(self, document_id: str, version_num: int) -> DocumentVersion | None:
        with self._session() as session:
            v = get_version(session, document_id, version_num)
            return _row_to_version(v) if v else None
