"""Document model: per-session working copies of documents and every block operation on them.

A DocumentEditor is bound to one verified subject id (supplied by the auth
provider, never checked here). Block mutations apply to the session's working
copy of a document and reach the store only through save_document, which
writes the whole ordered block list in one atomic put.

All checks run before any state changes, so a failed call leaves the working
copy exactly as it was.
"""

import logging
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from docblocks.config import Settings
from docblocks.core.models import (
    Block, Comment, Document, DocumentSummary, DocumentVersion, Position, Signature, Size,
)
from docblocks.core.utils.diff import diff_summary
from docblocks.core.utils.ids import new_id
from docblocks.crud.repo import DocumentStore
from docblocks.errors import AuthorizationError, NotFoundError, StorageError, ValidationError


logger = logging.getLogger(__name__)

PositionLike = Union[Position, tuple[float, float]]
SizeLike = Union[Size, tuple[float, float]]


def _coerce(model, value, field_names: tuple[str, str]):
    """Build a Position/Size from a model instance or an (a, b) pair; non-finite values are rejected."""
    if isinstance(value, model):
        return value
    try:
        a, b = value
        return model(**{field_names[0]: a, field_names[1]: b})
    except (TypeError, ValueError, PydanticValidationError) as e:
        raise ValidationError(f"Invalid {model.__name__.lower()}: {value!r}") from e


class DocumentEditor:
    """Working copies and operations for the documents of a single caller."""

    def __init__(self, store: DocumentStore, subject_id: str, settings: Optional[Settings] = None):
        if not subject_id:
            raise ValidationError("A verified subject id is required")
        self.store = store
        self.subject_id = subject_id
        self.settings = settings or Settings()
        self._drafts: dict[str, Document] = {}

    # --- validation ---

    def _position(self, value: PositionLike) -> Position:
        return _coerce(Position, value, ("x", "y"))

    def _size(self, value: SizeLike) -> Size:
        size = _coerce(Size, value, ("width", "height"))
        minimum = self.settings.min_block_size
        if size.width < minimum or size.height < minimum:
            raise ValidationError(
                f"Block size must be at least {minimum} x {minimum}, got {size.width} x {size.height}"
            )
        return size

    @staticmethod
    def _content(content: str) -> str:
        if not isinstance(content, str):
            raise ValidationError(f"Block content must be text, got {type(content).__name__}")
        return content

    @staticmethod
    def _title(title: str) -> str:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Document title must not be empty")
        return title

    def _check_document(self, document: Document) -> None:
        """Validate every invariant a stored document must satisfy."""
        self._title(document.title)
        ids = [b.id for b in document.blocks]
        if len(ids) != len(set(ids)):
            raise ValidationError(f"Document {document.id} has duplicate block ids")
        for b in document.blocks:
            self._size(b.size)
            self._content(b.content)

    # --- working copies ---

    def _readable(self, document_id: str) -> Document:
        """Fetch a stored document the caller may read."""
        doc = self.store.get(document_id)
        if doc is None:
            raise NotFoundError(f"Document {document_id} not found")
        if not doc.can_read(self.subject_id):
            raise AuthorizationError(f"Not authorized to read document {document_id}")
        return doc

    def _owned(self, document_id: str) -> Document:
        """Return the caller's working copy, opening it from the store if needed.

        Documents the caller does not own are reported as not found.
        """
        doc = self._drafts.get(document_id)
        if doc is None:
            doc = self.store.get(document_id)
            if doc is None or doc.owner_id != self.subject_id:
                raise NotFoundError(f"Document {document_id} not found")
            self._drafts[document_id] = doc
        return doc

    def _block(self, document_id: str, block_id: str) -> Block:
        doc = self._owned(document_id)
        index = doc.block_index(block_id)
        if index is None:
            raise NotFoundError(f"Block {block_id} not found in document {document_id}")
        return doc.blocks[index]

    # --- documents ---

    def create_document(self, title: str) -> Document:
        """Persist a new, empty document owned by the caller and open it for editing."""
        doc = Document(owner_id=self.subject_id, title=self._title(title))
        self.store.put(doc)
        self._drafts[doc.id] = doc.model_copy(deep=True)
        logger.info("Created document %s for %s", doc.id, self.subject_id)
        return self._drafts[doc.id]

    def load_document(self, document_id: str) -> Document:
        """Read the stored document, replacing any unsaved working copy of it.

        Readers get a detached copy; only the owner's load becomes the working copy.
        """
        doc = self._readable(document_id)
        if doc.owner_id == self.subject_id:
            self._drafts[document_id] = doc
        return doc

    def save_document(self, document: Document) -> str:
        """Persist the document's full block list atomically. Returns the store status.

        Re-saving an unchanged document is a no-op ('unchanged'). If the store
        fails the working copy is kept, so the same call can be retried. The stored
        readers always win over the working copy's; only share_document grants access.
        """
        if document.owner_id != self.subject_id:
            raise AuthorizationError(f"Only the owner may save document {document.id}")
        stored = self.store.get(document.id)
        if stored is not None and stored.owner_id != self.subject_id:
            raise AuthorizationError(f"Only the owner may save document {document.id}")
        self._check_document(document)
        # readers change only through share_document
        if stored is not None:
            document.readers = list(stored.readers)

        status = self.store.put(document)
        try:
            refreshed = self.store.get(document.id)
        except StorageError as e:
            logger.warning("Saved document %s but could not refresh it: %s", document.id, e)
        else:
            if refreshed is not None:
                document.updated_at = refreshed.updated_at
        self._drafts[document.id] = document
        logger.info("Saved document %s (%s, %d blocks)", document.id, status, len(document.blocks))
        return status

    def delete_document(self, document_id: str) -> None:
        self._owned(document_id)
        self.store.delete(document_id)
        self._drafts.pop(document_id, None)
        logger.info("Deleted document %s", document_id)

    def list_documents(self) -> list[DocumentSummary]:
        """Summaries of the caller's stored documents, most recently updated first."""
        return [
            DocumentSummary(
                id=d.id, title=d.title, owner_id=d.owner_id,
                block_count=len(d.blocks), updated_at=d.updated_at,
            )
            for d in self.store.list_by_owner(self.subject_id)
        ]

    def share_document(self, document_id: str, reader_id: str) -> Document:
        """Grant reader_id read access. Persists immediately; sharing twice is a no-op."""
        if not reader_id:
            raise ValidationError("Reader id must not be empty")
        stored = self.store.get(document_id)
        if stored is None or stored.owner_id != self.subject_id:
            raise NotFoundError(f"Document {document_id} not found")
        if reader_id != self.subject_id and reader_id not in stored.readers:
            stored.readers = [*stored.readers, reader_id]
            self.store.put(stored)
            logger.info("Shared document %s with %s", document_id, reader_id)
        draft = self._drafts.get(document_id)
        if draft is not None:
            draft.readers = list(stored.readers)
        return stored

    # --- blocks ---

    def add_block(
        self,
        document_id: str,
        content: Optional[str] = None,
        position: Optional[PositionLike] = None,
        size: Optional[SizeLike] = None,
        ) -> Block:
        """Append a new block on top of the z-order. Omitted values use configured defaults."""
        s = self.settings
        pos = self._position(position if position is not None else (s.default_block_x, s.default_block_y))
        dims = self._size(size if size is not None else (s.default_block_width, s.default_block_height))
        doc = self._owned(document_id)

        block_id = new_id()
        while doc.block_index(block_id) is not None:
            block_id = new_id()
        block = Block(
            id=block_id,
            content=s.default_block_content if content is None else self._content(content),
            position=pos,
            size=dims,
        )
        doc.blocks.append(block)
        return block

    def update_block_content(self, document_id: str, block_id: str, content: str) -> Block:
        self._content(content)
        block = self._block(document_id, block_id)
        block.content = content
        return block

    def update_block_geometry(
        self,
        document_id: str,
        block_id: str,
        position: PositionLike,
        size: SizeLike,
        ) -> Block:
        """Move and/or resize a block. Position is not clamped; order is unchanged."""
        pos = self._position(position)
        dims = self._size(size)
        block = self._block(document_id, block_id)
        block.position = pos
        block.size = dims
        return block

    def remove_block(self, document_id: str, block_id: str) -> None:
        doc = self._owned(document_id)
        index = doc.block_index(block_id)
        if index is None:
            raise NotFoundError(f"Block {block_id} not found in document {document_id}")
        del doc.blocks[index]

    # --- signatures & comments ---

    def sign_document(self, document_id: str, signer_name: str) -> Signature:
        if not isinstance(signer_name, str) or not signer_name.strip():
            raise ValidationError("Signer name must not be empty")
        self._readable(document_id)
        name = signer_name.strip()
        if self.settings.unique_signers:
            existing = {s.signer_name.casefold() for s in self.store.list_signatures(document_id)}
            if name.casefold() in existing:
                raise ValidationError(f"Document {document_id} is already signed by {name}")
        signature = Signature(document_id=document_id, signer_name=name, signer_id=self.subject_id)
        self.store.add_signature(signature)
        logger.info("Document %s signed by %s", document_id, name)
        return signature

    def list_signatures(self, document_id: str) -> list[Signature]:
        self._readable(document_id)
        return self.store.list_signatures(document_id)

    def add_comment(self, document_id: str, content: str) -> Comment:
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("Comment must not be empty")
        self._readable(document_id)
        comment = Comment(document_id=document_id, author_id=self.subject_id, content=content)
        return self.store.add_comment(comment)

    def list_comments(self, document_id: str) -> list[Comment]:
        self._readable(document_id)
        return self.store.list_comments(document_id)

    # --- versions ---

    def list_versions(self, document_id: str) -> list[DocumentVersion]:
        self._readable(document_id)
        return self.store.list_versions(document_id)

    def _version(self, document_id: str, version_num: int) -> DocumentVersion:
        version = self.store.get_version(document_id, version_num)
        if version is None:
            raise NotFoundError(f"Version {version_num} not found for document {document_id}")
        return version

    def revert_to_version(self, document_id: str, version_num: int) -> Document:
        """Replace the working copy's title and blocks with a stored snapshot. Call save_document to keep it."""
        doc = self._owned(document_id)
        version = self._version(document_id, version_num)
        doc.title = version.title
        doc.blocks = [b.model_copy(deep=True) for b in version.blocks]
        return doc

    def diff_versions(self, document_id: str, from_num: int, to_num: int) -> dict[str, int]:
        """Block-level change counts between two stored versions."""
        self._readable(document_id)
        old = self._version(document_id, from_num)
        new = self._version(document_id, to_num)
        return diff_summary(old.blocks, new.blocks)
