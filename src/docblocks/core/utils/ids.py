"""Collision-resistant identifiers for documents, blocks and records"""

from uuid import uuid4


def new_id() -> str:
    """Return a random 128-bit identifier as 32 hex chars."""
    return uuid4().hex
