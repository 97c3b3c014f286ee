"""Pure utilities for comparing two block sequences"""

import difflib


def diff_summary(old_blocks: list, new_blocks: list) -> dict[str, int]:
    """Return added/removed/edited/moved/unchanged block counts, matched by block id.

    A block whose content and geometry both changed counts as edited and moved.
    """
    old_by_id = {b.id: b for b in old_blocks}
    new_by_id = {b.id: b for b in new_blocks}
    added = sum(1 for bid in new_by_id if bid not in old_by_id)
    removed = sum(1 for bid in old_by_id if bid not in new_by_id)
    edited = moved = unchanged = 0

    for bid, new in new_by_id.items():
        old = old_by_id.get(bid)
        if old is None:
            continue
        content_changed = old.content != new.content
        geometry_changed = old.position != new.position or old.size != new.size
        edited += content_changed
        moved += geometry_changed
        if not (content_changed or geometry_changed):
            unchanged += 1

    return {"added": added, "removed": removed, "edited": edited, "moved": moved, "unchanged": unchanged}


def render_text(blocks: list) -> str:
    """Flatten blocks into text in z-order, one block per paragraph."""
    return "\n\n".join(b.content for b in blocks) + "\n" if blocks else ""


def unified_diff(
    old: str,
    new: str,
    from_label: str = "version_a",
    to_label: str = "version_b",
    context: int = 3,
    ) -> list[str]:
    """Return unified diff lines comparing old to new. Empty list if identical.

    Returns a list of lines; join with '' for display (lines already include newlines).
    """
    old_lines = old.splitlines(keepends=True)
    new_lines = new.splitlines(keepends=True)
    return list(
        difflib.unified_diff(old_lines, new_lines, fromfile=from_label, tofile=to_label, n=context)
    )
