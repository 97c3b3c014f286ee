"""CLI entrypoint: Typer app definition and command registration"""

import typer

from docblocks.cli.commands import (
    add_block_cmd, comment_cmd, comments_cmd, create_cmd, delete_cmd, diff_cmd, edit_cmd,
    history_cmd, init_cmd, list_cmd, move_cmd, remove_cmd, revert_cmd, share_cmd, show_cmd,
    sign_cmd,
)


app = typer.Typer(name="docblocks", no_args_is_help=True, help="Positioned text-block documents")

app.command(name="init")(init_cmd)
app.command(name="create")(create_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="delete")(delete_cmd)
app.command(name="add-block")(add_block_cmd)
app.command(name="edit")(edit_cmd)
app.command(name="move")(move_cmd)
app.command(name="remove")(remove_cmd)
app.command(name="share")(share_cmd)
app.command(name="sign")(sign_cmd)
app.command(name="comment")(comment_cmd)
app.command(name="comments")(comments_cmd)
app.command(name="history")(history_cmd)
app.command(name="revert")(revert_cmd)
app.command(name="diff")(diff_cmd)
