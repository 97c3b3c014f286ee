"""Persistence contract the document model relies on"""

from __future__ import annotations
from abc import ABC, abstractmethod

from docblocks.core.models import Comment, Document, DocumentVersion, Signature


class DocumentStore(ABC):
    """Keyed storage for documents and their ordered blocks.

    Implementations raise StorageError for engine failures and never retry.
    """

    @abstractmethod
    def get(self, document_id: str) -> Document | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, document: Document) -> str:
        """Atomically replace the stored document and its whole block list.

        Returns 'created', 'updated', or 'unchanged' (same content hash; nothing written).
        An update snapshots the previous state as a DocumentVersion first.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, document_id: str) -> bool:
        """Delete a document with its blocks, signatures, comments and versions."""
        raise NotImplementedError

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> list[Document]:
        raise NotImplementedError

    @abstractmethod
    def add_signature(self, signature: Signature) -> Signature:
        """Append a signature record. No uniqueness is enforced here.

        The one-signature-per-signer rule is checked by the editor before this
        call, so two concurrent sign calls for the same name can both succeed.
        """
        raise NotImplementedError

    @abstractmethod
    def list_signatures(self, document_id: str) -> list[Signature]:
        raise NotImplementedError

    @abstractmethod
    def add_comment(self, comment: Comment) -> Comment:
        raise NotImplementedError

    @abstractmethod
    def list_comments(self, document_id: str) -> list[Comment]:
        raise NotImplementedError

    @abstractmethod
    def list_versions(self, document_id: str) -> list[DocumentVersion]:
        """Return all versions ordered by version_num ascending."""
        raise NotImplementedError

    @abstractmethod
    def get_version(self, document_id: str, version_num: int) -> DocumentVersion | None:
        raise NotImplementedError
