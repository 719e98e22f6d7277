import asyncio
import json

import pytest

from smartnote.backends import (
    JsonFileBackend,
    MemoryBackend,
    SqliteBackend,
    atomic_write_text,
    make_backend,
)
from smartnote.errors import StorageError


@pytest.fixture(params=["memory", "json", "sqlite"])
def any_backend(request, tmp_path):
    if request.param == "memory":
        return MemoryBackend()
    if request.param == "json":
        return JsonFileBackend(tmp_path / "prefs.json")
    return SqliteBackend(tmp_path / "smartnote.db")


def test_absent_key_returns_none(any_backend):
    assert asyncio.run(any_backend.get_string("missing")) is None


def test_set_then_get(any_backend):
    asyncio.run(any_backend.set_string("k", "[1, 2]"))
    assert asyncio.run(any_backend.get_string("k")) == "[1, 2]"


def test_set_overwrites(any_backend):
    asyncio.run(any_backend.set_string("k", "first"))
    asyncio.run(any_backend.set_string("k", "second"))
    assert asyncio.run(any_backend.get_string("k")) == "second"


def test_keys_are_independent(any_backend):
    asyncio.run(any_backend.set_string("a", "1"))
    asyncio.run(any_backend.set_string("b", "2"))
    assert asyncio.run(any_backend.get_string("a")) == "1"


def test_json_file_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "prefs.json"
    asyncio.run(JsonFileBackend(path).set_string("k", "v"))

    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}
    assert asyncio.run(JsonFileBackend(path).get_string("k")) == "v"


def test_json_file_empty_file_is_absent(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("", encoding="utf-8")
    assert asyncio.run(JsonFileBackend(path).get_string("k")) is None


def test_json_file_corrupt_raises_storage_error(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{oops", encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(JsonFileBackend(path).get_string("k"))


def test_json_file_non_string_value_raises(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text('{"k": [1]}', encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(JsonFileBackend(path).get_string("k"))


def test_json_file_write_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(JsonFileBackend(blocker / "prefs.json").set_string("k", "v"))


def test_sqlite_persists_across_instances(tmp_path):
    db_path = tmp_path / "smartnote.db"
    asyncio.run(SqliteBackend(db_path).set_string("k", "v"))
    assert asyncio.run(SqliteBackend(db_path).get_string("k")) == "v"


def test_sqlite_failure_raises_storage_error(tmp_path):
    db_path = tmp_path / "not-a-db"
    db_path.write_text("plain text is not sqlite" * 100, encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(SqliteBackend(db_path).get_string("k"))


def test_atomic_write_leaves_no_temp_files(tmp_path):
    path = tmp_path / "out.json"
    atomic_write_text(path, "one")
    atomic_write_text(path, "two")

    assert path.read_text(encoding="utf-8") == "two"
    assert [p.name for p in tmp_path.iterdir()] == ["out.json"]


def test_make_backend(smartnote_env):
    assert isinstance(make_backend({"storage": {"backend": "memory"}}), MemoryBackend)
    assert isinstance(make_backend({"storage": {"backend": "sqlite"}}), SqliteBackend)
    json_backend = make_backend({})
    assert isinstance(json_backend, JsonFileBackend)
    assert json_backend.path == smartnote_env / "prefs.json"


def test_make_backend_unknown_name():
    with pytest.raises(ValueError, match="Unknown storage backend"):
        make_backend({"storage": {"backend": "redis"}})
