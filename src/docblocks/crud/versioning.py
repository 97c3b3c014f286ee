"""Document version persistence: save, prune, list and fetch snapshots"""

from sqlalchemy import func
from sqlmodel import Session, select

from docblocks.crud.tables import BlockRow, DocumentRow, DocumentVersionRow


def list_versions(session: Session, document_id: str) -> list[DocumentVersionRow]:
    """Return all versions for a document ordered by version_num ascending."""
    return list(
        session.exec(
            select(DocumentVersionRow)
            .where(DocumentVersionRow.document_id == document_id)
            .order_by(DocumentVersionRow.version_num.asc())
        ).all()
    )


def get_version(session: Session, document_id: str, version_num: int) -> DocumentVersionRow | None:
    return session.exec(
        select(DocumentVersionRow)
        .where(DocumentVersionRow.document_id == document_id)
        .where(DocumentVersionRow.version_num == version_num)
    ).one_or_none()


def prune_versions(session: Session, document_id: str, max_versions: int) -> int:
    """Delete oldest versions beyond max_versions. Returns count deleted. No-op if max_versions=0."""
    if max_versions == 0:
        return 0

    versions = list_versions(session, document_id)
    excess = len(versions) - max_versions
    if excess <= 0:
        return 0

    for v in versions[:excess]:
        session.delete(v)
    session.flush()

    return excess


def save_version(
    session: Session,
    doc: DocumentRow,
    blocks: list[BlockRow],
    max_versions: int = 10,
    ) -> DocumentVersionRow:
    """Snapshot the stored state of doc and its blocks as a new immutable version.

    Computes next version_num as MAX(version_num)+1 for this document.
    Flushes but does not commit; caller controls the transaction.
    """
    result = session.exec(
        select(func.max(DocumentVersionRow.version_num))
        .where(DocumentVersionRow.document_id == doc.id)
    ).one()

    version = DocumentVersionRow(
        document_id=doc.id,
        version_num=(result or 0) + 1,
        title=doc.title,
        hash=doc.hash,
        blocks=[
            {
                "id": b.id,
                "content": b.content,
                "position": {"x": b.x, "y": b.y},
                "size": {"width": b.width, "height": b.height},
            }
            for b in sorted(blocks, key=lambda b: b.z_index)
        ],
    )
    session.add(version)
    session.flush()

    if max_versions > 0:
        prune_versions(session, doc.id, max_versions)

    return version
