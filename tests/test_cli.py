import io
import json
import sys

import pytest

from smartnote import __version__, cli


@pytest.fixture
def run(smartnote_env, monkeypatch, capsys):
    """Run the CLI with args; returns (exit code, stdout, stderr)."""

    monkeypatch.setattr("smartnote.config.configure_logging", lambda config=None: None)

    def _run(*args, stdin=""):
        monkeypatch.setattr(sys, "argv", ["smartnote", *args])
        monkeypatch.setattr(sys, "stdin", io.StringIO(stdin))
        code = cli.main()
        out, err = capsys.readouterr()
        return code, out, err

    return _run


def stored(smartnote_env):
    prefs = json.loads((smartnote_env / "prefs.json").read_text(encoding="utf-8"))
    return json.loads(prefs["smart_notes_v1"])


def test_help_and_version(run):
    code, out, _ = run("--help")
    assert code == 0
    assert "smartnote find <query>" in out

    code, out, _ = run("--version")
    assert out.strip() == f"smartnote {__version__}"


def test_list_empty(run):
    code, out, _ = run("list")
    assert code == 0
    assert "You don't have any notes yet" in out


def test_new_then_list(run, smartnote_env):
    code, out, _ = run("new", "--title", "Shopping", "--content", "milk")
    assert code == 0
    note_id = out.strip()

    records = stored(smartnote_env)
    assert [r["id"] for r in records] == [note_id]
    assert records[0]["title"] == "Shopping"

    code, out, _ = run("list")
    assert "Shopping" in out
    assert "milk" in out


def test_new_from_words_and_stdin(run, smartnote_env):
    run("new", "buy", "milk")
    run("new", stdin="call the plumber\n")

    contents = sorted(r["content"] for r in stored(smartnote_env))
    assert contents == ["buy milk", "call the plumber"]


def test_new_blank_is_discarded(run, smartnote_env):
    code, out, _ = run("new", "--title", "  ", stdin="")

    assert code == 0
    assert "discarded" in out
    assert not (smartnote_env / "prefs.json").exists()


def test_edit_changes_title_and_keeps_id(run, smartnote_env):
    _, out, _ = run("new", "--title", "Shopping", "--content", "milk")
    note_id = out.strip()

    code, out, _ = run("edit", note_id, "--title", "Shopping list")

    assert code == 0
    assert out.strip() == f"Saved: {note_id}"
    records = stored(smartnote_env)
    assert len(records) == 1
    assert records[0] == {**records[0], "id": note_id, "title": "Shopping list", "content": "milk"}


def test_edit_without_changes_is_not_saved(run, smartnote_env):
    _, out, _ = run("new", "--title", "Shopping", "--content", "milk")
    note_id = out.strip()
    before = stored(smartnote_env)

    code, out, _ = run("edit", note_id, "--title", " Shopping ")

    assert code == 0
    assert out.strip() == f"No changes: {note_id}"
    assert stored(smartnote_env) == before


def test_edit_unknown_id(run):
    code, _, err = run("edit", "nope", "--title", "x")
    assert code == 1
    assert "Not found: nope" in err


def test_find(run):
    run("new", "--title", "Shopping list", "--content", "milk")
    run("new", "--title", "Work", "--content", "shopping in content only")

    code, out, _ = run("find", "SHOP")

    assert code == 0
    assert "Notes matching 'SHOP' (1 note)" in out
    assert "Shopping list" in out
    assert "Work" not in out


def test_find_requires_query(run):
    code, _, err = run("find")
    assert code == 1
    assert "Usage" in err


def test_show(run):
    _, out, _ = run("new", "--title", "Shopping", "--content", "milk\neggs")
    note_id = out.strip()

    code, out, _ = run("show", note_id)

    assert code == 0
    assert out.startswith("Shopping")
    assert "milk\neggs" in out


def test_delete_with_yes(run, smartnote_env):
    _, out, _ = run("new", "--title", "A")
    keep_id = out.strip()
    _, out, _ = run("new", "--title", "B")
    drop_id = out.strip()

    code, out, _ = run("delete", drop_id, "--yes")

    assert code == 0
    assert out.strip() == f"Deleted: {drop_id}"
    assert [r["id"] for r in stored(smartnote_env)] == [keep_id]


def test_delete_asks_for_confirmation(run, smartnote_env, monkeypatch):
    _, out, _ = run("new", "--title", "A")
    note_id = out.strip()

    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    code, out, _ = run("delete", note_id)
    assert out.strip() == "Cancelled."
    assert len(stored(smartnote_env)) == 1

    monkeypatch.setattr("builtins.input", lambda prompt: "y")
    code, out, _ = run("delete", note_id)
    assert code == 0
    assert stored(smartnote_env) == []


def test_delete_unknown_id(run):
    code, _, err = run("delete", "nope", "--yes")
    assert code == 1
    assert "Not found: nope" in err


def test_storage_error_is_reported(run, smartnote_env):
    smartnote_env.mkdir(parents=True)
    (smartnote_env / "prefs.json").write_text("{not json", encoding="utf-8")

    code, _, err = run("list")

    assert code == 1
    assert err.startswith("Error:")


def test_unknown_command(run):
    code, _, err = run("frobnicate")
    assert code == 1
    assert "Unknown command" in err


def test_health(run):
    code, out, _ = run("health")
    assert code == 0
    assert "Smart Note Health Check" in out


def test_sqlite_backend_from_config(run, smartnote_env):
    from smartnote.config import get_config_path

    path = get_config_path()
    path.parent.mkdir(parents=True)
    path.write_text('[storage]\nbackend = "sqlite"\n', encoding="utf-8")

    _, out, _ = run("new", "--title", "In sqlite")
    code, out, _ = run("list")

    assert "In sqlite" in out
    assert (smartnote_env / "smartnote.db").exists()
    assert not (smartnote_env / "prefs.json").exists()


def test_parse_options():
    positionals, options = cli.parse_options(
        ["id1", "-t", "T", "--content", "C", "--title"], cli.EDIT_OPTIONS
    )
    assert positionals == ["id1", "--title"]
    assert options == {"title": "T", "content": "C"}
