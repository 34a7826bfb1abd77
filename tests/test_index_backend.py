"""
Index backend contract: replace/delete/count, candidate grouping and
visibility, persistence of file backends, rollback on failed writes.
"""

import json
import sqlite3
import sys
import threading
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from trigram.ngrams import extract_trigrams
from trigram_server import JsonIndexBackend, MemoryIndexBackend, SqliteIndexBackend, TrigramServer


@pytest.fixture(params=["memory", "json", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        b = MemoryIndexBackend()
    elif request.param == "json":
        b = JsonIndexBackend(tmp_path / "index.json")
    else:
        b = SqliteIndexBackend(tmp_path / "index.db")
    yield b
    b.close()


def test_replace_and_count(backend):
    backend.replace_entries(1, extract_trigrams("meier"))
    assert backend.count_entries(1) == 5
    assert backend.entries(1) == {" me", "mei", "eie", "ier", "er "}


def test_replace_drops_old_entries(backend):
    backend.replace_entries(1, extract_trigrams("meier"))
    backend.replace_entries(1, extract_trigrams("mayr"))
    assert backend.entries(1) == {" ma", "may", "ayr", "yr "}
    assert backend.candidates_for({"mei"}) == []


def test_replace_is_idempotent(backend):
    trigrams = extract_trigrams("kristian meier")
    backend.replace_entries(7, trigrams)
    first = backend.entries(7)
    backend.replace_entries(7, trigrams)
    assert backend.entries(7) == first == trigrams


def test_duplicates_stored_once(backend):
    backend.replace_entries(1, [" aa", "aaa", "aaa", "aa "])
    assert backend.count_entries(1) == 3


def test_delete_entries(backend):
    backend.replace_entries(1, extract_trigrams("meier"))
    backend.replace_entries(2, extract_trigrams("meyer"))
    backend.delete_entries(1)
    assert backend.count_entries(1) == 0
    assert backend.entries(1) == set()
    assert backend.count_entries(2) == 5


def test_unknown_record_has_no_entries(backend):
    assert backend.count_entries(99) == 0
    backend.delete_entries(99)


def test_candidates_grouped_per_record(backend):
    backend.replace_entries(2, extract_trigrams("meyer"))
    backend.replace_entries(1, extract_trigrams("meier"))
    backend.replace_entries(3, extract_trigrams("other"))
    rows = backend.candidates_for(extract_trigrams("meyr"))
    # " me" in both, "mey" only in meyer; ordered by record id
    assert rows == [(1, 1), (2, 2)]


def test_candidates_empty_query(backend):
    backend.replace_entries(1, extract_trigrams("meier"))
    assert backend.candidates_for(set()) == []


def test_candidates_visibility(backend):
    backend.replace_entries(1, extract_trigrams("meier"))
    backend.replace_entries(2, extract_trigrams("meier"))
    rows = backend.candidates_for(extract_trigrams("meier"), visible=lambda rid: rid != 1)
    assert rows == [(2, 5)]


def test_scored_candidates_include_entry_counts(backend):
    backend.replace_entries(1, extract_trigrams("kristian meier"))
    backend.replace_entries(2, extract_trigrams("meyer"))
    rows = backend.scored_candidates(extract_trigrams("meier"))
    assert rows == [(1, 5, 13), (2, 2, 5)]


def test_json_persists_between_instances(tmp_path):
    path = tmp_path / "index.json"
    b = JsonIndexBackend(path)
    b.replace_entries(1, extract_trigrams("meier"))
    b.replace_entries("x", extract_trigrams("ab"))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert {row["record_id"] for row in data} == {1, "x"}
    reopened = JsonIndexBackend(path)
    assert reopened.entries(1) == extract_trigrams("meier")
    assert reopened.candidates_for({" ab"}) == [("x", 1)]


def test_json_failed_write_restores_memory(tmp_path):
    path = tmp_path / "index.json"
    b = JsonIndexBackend(path)
    b.replace_entries(1, extract_trigrams("meier"))
    bad_id = object()
    with pytest.raises(TypeError):
        b.replace_entries(bad_id, extract_trigrams("meyer"))
    assert b.count_entries(bad_id) == 0
    assert b.candidates_for({"mey"}) == []
    assert JsonIndexBackend(path).entries(1) == extract_trigrams("meier")
    assert not list(tmp_path.glob("*.tmp"))


def test_sqlite_persists_between_instances(tmp_path):
    path = tmp_path / "index.db"
    b = SqliteIndexBackend(path)
    b.replace_entries(1, extract_trigrams("meier"))
    b.close()
    reopened = SqliteIndexBackend(path)
    assert reopened.count_entries(1) == 5
    reopened.close()


def test_sqlite_failed_replace_rolls_back(tmp_path):
    b = SqliteIndexBackend(tmp_path / "index.db")
    b.replace_entries(1, extract_trigrams("meier"))
    # The DELETE succeeds, binding the token fails: nothing may be committed
    with pytest.raises(sqlite3.Error):
        b.replace_entries(1, {object()})
    assert b.entries(1) == extract_trigrams("meier")
    b.close()


def test_sqlite_rejects_bad_table_name(tmp_path):
    with pytest.raises(ValueError):
        SqliteIndexBackend(tmp_path / "index.db", table="x; DROP TABLE y")


def test_reader_never_sees_partial_record():
    backend = MemoryIndexBackend()
    old, new = extract_trigrams("meier"), extract_trigrams("kristian christoph")
    backend.replace_entries(1, old)
    seen = set()
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            seen.add(frozenset(backend.entries(1)))

    def writer():
        for i in range(500):
            backend.replace_entries(1, new if i % 2 else old)

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    writers = [threading.Thread(target=writer) for _ in range(3)]
    for t in writers:
        t.start()
    for t in writers:
        t.join()
    stop.set()
    for t in threads:
        t.join()
    assert seen <= {frozenset(old), frozenset(new)}


def test_server_from_storage(tmp_path):
    server = TrigramServer.from_storage(tmp_path / "sqlite")
    assert isinstance(server.backend, SqliteIndexBackend)
    server.upload_trigrams(1, extract_trigrams("meier"))
    assert server.match(extract_trigrams("meier")) == [(1, 100.0)]
    server.close()
    json_server = TrigramServer.from_storage(tmp_path / "json", use_sqlite_index=False)
    assert isinstance(json_server.backend, JsonIndexBackend)
    assert (tmp_path / "json").is_dir()


def test_server_match_empty_set():
    server = TrigramServer()
    server.upload_trigrams(1, extract_trigrams("meier"))
    assert server.match(set()) == []
