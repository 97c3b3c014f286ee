"""SHA-256 content hashing for document change detection"""

import hashlib
import json


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars, matches String(64) column)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def document_hash(document) -> str:
    """Hash the persisted state of a document: title, readers and the ordered block list.

    Timestamps are excluded so re-saving an unchanged document hashes the same.
    """
    payload = {
        "title": document.title,
        "readers": sorted(document.readers),
        "blocks": [b.model_dump(mode="json") for b in document.blocks],
    }
    return sha256(json.dumps(payload, sort_keys=True, separators=(",", ":")))
