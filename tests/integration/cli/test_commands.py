"""Integration tests for the CLI commands against a SQLite file database"""

import json

import pytest
from typer.testing import CliRunner

from docblocks.cli.cli import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def db_env(tmp_path, monkeypatch):
    """Point every command at a fresh database in a clean tmp directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DOCBLOCKS_DB_URL", f"sqlite:///{tmp_path}/test.db")
    monkeypatch.delenv("DOCBLOCKS_USER", raising=False)


def _run(*args: str) -> str:
    result = runner.invoke(app, list(args))
    assert result.exit_code == 0, result.output
    return result.stdout.strip()


def _create(title: str = "Plan", user: str = "u1") -> str:
    return _run("create", title, "--user", user)


def _show_json(doc_id: str, user: str = "u1") -> dict:
    return json.loads(_run("show", doc_id, "--user", user, "--json"))


def test_init_cmd():
    assert "Database initialized" in _run("init")


def test_plan_scenario():
    """Two blocks added through the CLI reload in order; another user is refused."""
    doc_id = _create()
    intro = _run("add-block", doc_id, "-u", "u1", "-c", "Intro",
                 "--x", "0", "--y", "0", "--width", "200", "--height", "100")
    body = _run("add-block", doc_id, "-u", "u1", "-c", "Body",
                "--x", "0", "--y", "120", "--width", "200", "--height", "300")

    data = _show_json(doc_id)
    assert data["title"] == "Plan"
    assert [b["id"] for b in data["blocks"]] == [intro, body]
    assert data["blocks"][1]["position"] == {"x": 0.0, "y": 120.0}
    assert data["blocks"][1]["size"] == {"width": 200.0, "height": 300.0}

    result = runner.invoke(app, ["show", doc_id, "--user", "u2"])
    assert result.exit_code == 1
    assert "Not authorized" in result.output


def test_user_from_env(monkeypatch):
    monkeypatch.setenv("DOCBLOCKS_USER", "u1")
    doc_id = _run("create", "Plan")
    assert "Plan" in _run("show", doc_id)


def test_add_block_defaults():
    doc_id = _create()
    _run("add-block", doc_id, "-u", "u1")
    [block] = _show_json(doc_id)["blocks"]
    assert block["content"] == "New Text Block"
    assert block["position"] == {"x": 100.0, "y": 100.0}


def test_add_block_rejects_zero_size():
    doc_id = _create()
    result = runner.invoke(app, ["add-block", doc_id, "-u", "u1", "--width", "0"])
    assert result.exit_code == 1
    assert "Block size" in result.output
    assert _show_json(doc_id)["blocks"] == []


def test_edit_move_remove():
    doc_id = _create()
    a = _run("add-block", doc_id, "-u", "u1", "-c", "A")
    b = _run("add-block", doc_id, "-u", "u1", "-c", "B")

    _run("edit", doc_id, a, "A edited", "-u", "u1")
    _run("move", doc_id, a, "-u", "u1", "--x=-40", "--height", "55")
    blocks = _show_json(doc_id)["blocks"]
    assert [blk["id"] for blk in blocks] == [a, b]
    assert blocks[0]["content"] == "A edited"
    assert blocks[0]["position"] == {"x": -40.0, "y": 100.0}
    assert blocks[0]["size"] == {"width": 200.0, "height": 55.0}

    _run("remove", doc_id, b, "-u", "u1")
    assert [blk["id"] for blk in _show_json(doc_id)["blocks"]] == [a]


def test_move_unknown_block():
    doc_id = _create()
    result = runner.invoke(app, ["move", doc_id, "nope", "-u", "u1", "--x", "1"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_list_cmd():
    assert _run("list", "-u", "u1") == "No documents found."
    doc_id = _create("Quarterly report")
    out = _run("list", "-u", "u1")
    assert doc_id in out and "Quarterly report" in out


def test_share_sign_comment():
    doc_id = _create()
    _run("share", doc_id, "u2", "-u", "u1")
    assert "Signed by Jane Smith" in _run("sign", doc_id, "Jane Smith", "-u", "u2")
    _run("comment", doc_id, "Looks good", "-u", "u2")
    out = _run("comments", doc_id, "-u", "u1")
    assert "Jane Smith" in out
    assert "Looks good" in out

    result = runner.invoke(app, ["sign", doc_id, "Jane Smith", "-u", "u1"])
    assert result.exit_code == 1
    assert "already signed" in result.output


def test_history_revert_diff():
    doc_id = _create()
    a = _run("add-block", doc_id, "-u", "u1", "-c", "first")
    _run("edit", doc_id, a, "second", "-u", "u1")
    _run("edit", doc_id, a, "third", "-u", "u1")

    history = _run("history", doc_id, "-u", "u1")
    assert "v1" in history and "v2" in history and "v3" in history

    assert "edited=1" in _run("diff", doc_id, "2", "3", "-u", "u1")
    text = _run("diff", doc_id, "2", "3", "-u", "u1", "--text")
    assert "-first" in text and "+second" in text

    _run("revert", doc_id, "2", "-u", "u1")
    assert [b["content"] for b in _show_json(doc_id)["blocks"]] == ["first"]


def test_delete_cmd():
    doc_id = _create()
    _run("delete", doc_id, "-u", "u1")
    result = runner.invoke(app, ["show", doc_id, "-u", "u1"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_invalid_config(tmp_path):
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    result = runner.invoke(app, ["list", "-u", "u1"])
    assert result.exit_code == 1
    assert "Invalid config.yaml" in result.output


@pytest.mark.parametrize("args", [["init"], ["init", "--reset"], ["list", "-u", "u1"]])
def test_bad_db_url(monkeypatch, args):
    monkeypatch.setenv("DOCBLOCKS_DB_URL", "nosuchdialect://localhost/docs")
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert "Cannot open database" in result.output
