from dataclasses import dataclass, field
from datetime import datetime

from docblocks.core.models import Comment, Document, DocumentVersion, Signature
from docblocks.core.utils.hashing import document_hash
from docblocks.crud.repo import DocumentStore


@dataclass
class MemoryStore(DocumentStore):
    """Dict-backed store. Records are deep-copied in and out so callers never share state with it."""
    max_versions: int = 10
    _docs: dict[str, Document] = field(default_factory=dict)
    _hashes: dict[str, str] = field(default_factory=dict)
    _versions: dict[str, list[DocumentVersion]] = field(default_factory=dict)
    _signatures: dict[str, list[Signature]] = field(default_factory=dict)
    _comments: dict[str, list[Comment]] = field(default_factory=dict)

    def get(self, document_id: str) -> Document | None:
        doc = self._docs.get(document_id)
        return doc.model_copy(deep=True) if doc else None

    def put(self, document: Document) -> str:
        new_hash = document_hash(document)
        current = self._docs.get(document.id)
        if current is not None and self._hashes[document.id] == new_hash:
            return "unchanged"

        if current is not None:
            self._snapshot(current)
        stored = document.model_copy(deep=True)
        if current is not None:
            stored.created_at = current.created_at
            stored.updated_at = datetime.now()
        self._docs[document.id] = stored
        self._hashes[document.id] = new_hash
        return "updated" if current is not None else "created"

    def _snapshot(self, doc: Document) -> None:
        versions = self._versions.setdefault(doc.id, [])
        num = versions[-1].version_num + 1 if versions else 1
        versions.append(DocumentVersion(
            document_id=doc.id,
            version_num=num,
            title=doc.title,
            hash=self._hashes[doc.id],
            blocks=[b.model_copy(deep=True) for b in doc.blocks],
        ))
        if self.max_versions > 0 and len(versions) > self.max_versions:
            del versions[:len(versions) - self.max_versions]

    def delete(self, document_id: str) -> bool:
        if document_id not in self._docs:
            return False
        for table in (self._docs, self._hashes, self._versions, self._signatures, self._comments):
            table.pop(document_id, None)
        return True

    def list_by_owner(self, owner_id: str) -> list[Document]:
        docs = [d for d in self._docs.values() if d.owner_id == owner_id]
        return [d.model_copy(deep=True) for d in sorted(docs, key=lambda d: d.updated_at, reverse=True)]

    def add_signature(self, signature: Signature) -> Signature:
        self._signatures.setdefault(signature.document_id, []).append(signature.model_copy())
        return signature

    def list_signatures(self, document_id: str) -> list[Signature]:
        return [s.model_copy() for s in self._signatures.get(document_id, [])]

    def add_comment(self, comment: Comment) -> Comment:
        self._comments.setdefault(comment.document_id, []).append(comment.model_copy())
        return comment

    def list_comments(self, document_id: str) -> list[Comment]:
        return [c.model_copy() for c in self._comments.get(document_id, [])]

    def list_versions(self, document_id: str) -> list[DocumentVersion]:
        return [v.model_copy(deep=True) for v in self._versions.get(document_id, [])]

    def get_version(self, document_id: str, version_num: int) -> DocumentVersion | None:
        for v in self._versions.get(document_id, []):
            if v.version_num == version_num:
                return v.model_copy(deep=True)
        return None
