"""Unit tests for core/models.py and core/utils/hashing.py"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from docblocks.core.models import Block, Document, Position, Size
from docblocks.core.utils.hashing import document_hash, sha256


def _doc(**kwargs) -> Document:
    return Document(owner_id="u1", title="Plan", **kwargs)


def _block(content: str = "text", x: float = 0, y: float = 0) -> Block:
    return Block(content=content, position=Position(x=x, y=y), size=Size(width=10, height=10))


def test_block_ids_default_unique():
    """Blocks and documents get random 32-char hex ids by default."""
    ids = {_block().id for _ in range(100)}
    assert len(ids) == 100
    assert all(len(i) == 32 for i in ids)


def test_block_index():
    a, b = _block("a"), _block("b")
    doc = _doc(blocks=[a, b])
    assert doc.block_index(b.id) == 1
    assert doc.block_index("missing") is None


@pytest.mark.parametrize("subject,expected", [("u1", True), ("u2", True), ("u3", False)])
def test_can_read(subject, expected):
    assert _doc(readers=["u2"]).can_read(subject) is expected


def test_position_rejects_non_finite():
    with pytest.raises(PydanticValidationError):
        Position(x=float("inf"), y=0)


def test_position_is_frozen():
    p = Position(x=1, y=2)
    with pytest.raises(PydanticValidationError):
        p.x = 5


def test_sha256_length():
    assert len(sha256("hello")) == 64


def test_document_hash_ignores_timestamps():
    """Hash depends on title, readers and blocks only."""
    blocks = [_block("a")]
    d1 = _doc(blocks=blocks)
    d2 = d1.model_copy(update={"updated_at": d1.updated_at.replace(year=2000)})
    assert document_hash(d1) == document_hash(d2)


def test_document_hash_is_order_sensitive():
    """Swapping z-order changes the hash."""
    a, b = _block("a"), _block("b")
    assert document_hash(_doc(blocks=[a, b])) != document_hash(_doc(blocks=[b, a]))


def test_document_hash_ignores_reader_order():
    assert document_hash(_doc(readers=["x", "y"])) == document_hash(_doc(readers=["y", "x"]))


def test_document_hash_tracks_geometry():
    a = _block("a")
    moved = a.model_copy(update={"position": Position(x=5, y=0)})
    assert document_hash(_doc(blocks=[a])) != document_hash(_doc(blocks=[moved]))
