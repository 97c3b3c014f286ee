"""CLI command implementations"""

import logging
from contextlib import contextmanager
from typing import Annotated, Optional

import typer
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from docblocks.config import Settings, load_config
from docblocks.core.editor import DocumentEditor
from docblocks.core.models import Block, Document
from docblocks.core.utils.diff import render_text, unified_diff
from docblocks.crud.database import drop_db, init_db, make_engine
from docblocks.crud.sql_repo import SQLStore
from docblocks.errors import DocblocksError, NotFoundError


User = Annotated[str, typer.Option("--user", "-u", envvar="DOCBLOCKS_USER", help="Verified subject id of the caller")]
DocId = Annotated[str, typer.Argument(help="Document id")]
BlockId = Annotated[str, typer.Argument(help="Block id")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _engine(settings: Settings, reset: bool = False) -> Engine:
    """Create the engine and make sure the schema exists; any failure exits with a message."""
    try:
        engine = make_engine(settings.db_url, settings.db_timeout)
        if reset:
            drop_db(engine)
        init_db(engine)
    except SQLAlchemyError as e:
        _fail(f"Cannot open database at {settings.db_url}", e)
    return engine


def _editor(user: str) -> DocumentEditor:
    """Open the configured store and bind an editor to the calling subject."""
    settings = _settings()
    engine = _engine(settings)
    return DocumentEditor(SQLStore(engine, settings.max_versions), user, settings)


@contextmanager
def _reported():
    """Turn model errors into a one-line message and exit code 1."""
    try:
        yield
    except DocblocksError as e:
        _fail(str(e))


def _echo_block(index: int, block: Block) -> None:
    p, s = block.position, block.size
    typer.echo(f"  [{index}] {block.id} ({p.x:g}, {p.y:g}) {s.width:g}x{s.height:g}: {block.content}")


def _echo_document(doc: Document) -> None:
    typer.echo(f"{doc.title} ({doc.id})")
    typer.echo(f"  owner: {doc.owner_id}")
    if doc.readers:
        typer.echo(f"  readers: {', '.join(doc.readers)}")
    for i, block in enumerate(doc.blocks):
        _echo_block(i, block)


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    _engine(settings, reset=reset)
    if reset:
        typer.echo("Existing data cleared.")
    typer.echo(f"Database initialized at: {settings.db_url}")


def create_cmd(
    title: Annotated[str, typer.Argument(help="Document title")],
    user: User,
    ):
    """Create an empty document and print its id."""
    editor = _editor(user)
    with _reported():
        doc = editor.create_document(title)
    typer.echo(doc.id)


def list_cmd(user: User):
    """List the caller's documents, most recently updated first."""
    editor = _editor(user)
    with _reported():
        summaries = editor.list_documents()
    if not summaries:
        typer.echo("No documents found.")
        return
    for s in summaries:
        typer.echo(f"{s.id}  {s.title}  ({s.block_count} blocks, updated {s.updated_at:%Y-%m-%d %H:%M})")


def show_cmd(
    document_id: DocId,
    user: User,
    as_json: Annotated[bool, typer.Option("--json", help="Print the document as JSON")] = False,
    ):
    """Print a document and its blocks in z-order (last drawn on top)."""
    editor = _editor(user)
    with _reported():
        doc = editor.load_document(document_id)
    if as_json:
        typer.echo(doc.model_dump_json(indent=2))
    else:
        _echo_document(doc)


def delete_cmd(document_id: DocId, user: User):
    """Delete a document with its blocks, signatures, comments and history."""
    editor = _editor(user)
    with _reported():
        editor.delete_document(document_id)
    typer.echo(f"Deleted {document_id}")


def add_block_cmd(
    document_id: DocId,
    user: User,
    content: Annotated[Optional[str], typer.Option("--content", "-c", help="Block text")] = None,
    x: Annotated[Optional[float], typer.Option("--x", help="Left edge")] = None,
    y: Annotated[Optional[float], typer.Option("--y", help="Top edge")] = None,
    width: Annotated[Optional[float], typer.Option("--width", help="Block width")] = None,
    height: Annotated[Optional[float], typer.Option("--height", help="Block height")] = None,
    ):
    """Add a block on top of the document and save. Prints the new block id."""
    editor = _editor(user)
    s = editor.settings
    position = None
    if x is not None or y is not None:
        position = (s.default_block_x if x is None else x, s.default_block_y if y is None else y)
    size = None
    if width is not None or height is not None:
        size = (s.default_block_width if width is None else width,
                s.default_block_height if height is None else height)

    with _reported():
        doc = editor.load_document(document_id)
        block = editor.add_block(document_id, content, position, size)
        editor.save_document(doc)
    typer.echo(block.id)


def edit_cmd(
    document_id: DocId,
    block_id: BlockId,
    content: Annotated[str, typer.Argument(help="New block text")],
    user: User,
    ):
    """Replace a block's text and save."""
    editor = _editor(user)
    with _reported():
        doc = editor.load_document(document_id)
        editor.update_block_content(document_id, block_id, content)
        editor.save_document(doc)
    typer.echo(f"Updated {block_id}")


def move_cmd(
    document_id: DocId,
    block_id: BlockId,
    user: User,
    x: Annotated[Optional[float], typer.Option("--x", help="Left edge")] = None,
    y: Annotated[Optional[float], typer.Option("--y", help="Top edge")] = None,
    width: Annotated[Optional[float], typer.Option("--width", help="Block width")] = None,
    height: Annotated[Optional[float], typer.Option("--height", help="Block height")] = None,
    ):
    """Move and/or resize a block and save. Omitted values keep their current setting."""
    editor = _editor(user)
    with _reported():
        doc = editor.load_document(document_id)
        index = doc.block_index(block_id)
        if index is None:
            raise NotFoundError(f"Block {block_id} not found in document {document_id}")
        p, s = doc.blocks[index].position, doc.blocks[index].size
        x, y = p.x if x is None else x, p.y if y is None else y
        width, height = s.width if width is None else width, s.height if height is None else height
        editor.update_block_geometry(document_id, block_id, (x, y), (width, height))
        editor.save_document(doc)
    typer.echo(f"Moved {block_id}")


def remove_cmd(document_id: DocId, block_id: BlockId, user: User):
    """Remove a block and save."""
    editor = _editor(user)
    with _reported():
        doc = editor.load_document(document_id)
        editor.remove_block(document_id, block_id)
        editor.save_document(doc)
    typer.echo(f"Removed {block_id}")


def share_cmd(
    document_id: DocId,
    reader: Annotated[str, typer.Argument(help="Subject id to grant read access")],
    user: User,
    ):
    """Let another user read, sign and comment on a document."""
    editor = _editor(user)
    with _reported():
        editor.share_document(document_id, reader)
    typer.echo(f"Shared {document_id} with {reader}")


def sign_cmd(
    document_id: DocId,
    name: Annotated[str, typer.Argument(help="Full name of the signer")],
    user: User,
    ):
    """Sign a document by typing your full name."""
    editor = _editor(user)
    with _reported():
        signature = editor.sign_document(document_id, name)
    typer.echo(f"Signed by {signature.signer_name} at {signature.signed_at:%Y-%m-%d %H:%M}")


def comment_cmd(
    document_id: DocId,
    text: Annotated[str, typer.Argument(help="Comment text")],
    user: User,
    ):
    """Add a comment to a document."""
    editor = _editor(user)
    with _reported():
        comment = editor.add_comment(document_id, text)
    typer.echo(comment.id)


def comments_cmd(document_id: DocId, user: User):
    """List a document's signatures and comments, oldest first."""
    editor = _editor(user)
    with _reported():
        signatures = editor.list_signatures(document_id)
        comments = editor.list_comments(document_id)
    for s in signatures:
        typer.echo(f"signed  {s.signed_at:%Y-%m-%d %H:%M}  {s.signer_name}")
    for c in comments:
        typer.echo(f"{c.author_id}  {c.created_at:%Y-%m-%d %H:%M}  {c.content}")
    if not signatures and not comments:
        typer.echo("No signatures or comments.")


def history_cmd(document_id: DocId, user: User):
    """List stored versions of a document."""
    editor = _editor(user)
    with _reported():
        versions = editor.list_versions(document_id)
    if not versions:
        typer.echo("No versions stored.")
        return
    for v in versions:
        typer.echo(f"v{v.version_num}  {v.created_at:%Y-%m-%d %H:%M}  {v.title}  ({len(v.blocks)} blocks)")


def revert_cmd(
    document_id: DocId,
    version: Annotated[int, typer.Argument(help="Version number to restore")],
    user: User,
    ):
    """Restore a prior version as the current state (the current state becomes a new version)."""
    editor = _editor(user)
    with _reported():
        doc = editor.load_document(document_id)
        editor.revert_to_version(document_id, version)
        status = editor.save_document(doc)
    typer.echo(f"Reverted {document_id} to v{version} ({status})")


def diff_cmd(
    document_id: DocId,
    from_num: Annotated[int, typer.Argument(help="Older version number")],
    to_num: Annotated[int, typer.Argument(help="Newer version number")],
    user: User,
    text: Annotated[bool, typer.Option("--text", help="Also print a unified diff of block text")] = False,
    ):
    """Summarize block changes between two stored versions."""
    editor = _editor(user)
    with _reported():
        counts = editor.diff_versions(document_id, from_num, to_num)
        versions = {v.version_num: v for v in editor.list_versions(document_id)}
    typer.echo(", ".join(f"{k}={v}" for k, v in counts.items()))
    if text:
        lines = unified_diff(
            render_text(versions[from_num].blocks), render_text(versions[to_num].blocks),
            f"v{from_num}", f"v{to_num}",
        )
        typer.echo("".join(lines), nl=False)
