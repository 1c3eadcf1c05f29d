import sqlite3

from resay.data.storage import KeyValueStore


def test_set_upserts_on_key(tmp_path):
    db_path = tmp_path / "resay.db"
    store = KeyValueStore(db_path)
    store.initialize()

    store.set("global_instructions", '["a"]')
    store.set("global_instructions", '["b"]')

    with sqlite3.connect(db_path) as conn:
        count = conn.execute(
            "SELECT COUNT(*) FROM kv WHERE key = ?", ("global_instructions",)
        ).fetchone()[0]

    assert count == 1
    assert store.get("global_instructions") == '["b"]'


def test_values_survive_a_new_store_instance(tmp_path):
    db_path = tmp_path / "nested" / "resay.db"
    first = KeyValueStore(db_path)
    first.initialize()
    first.set("k", "v")

    second = KeyValueStore(db_path)
    second.initialize()

    assert second.get("k") == "v"
    assert second.get("missing") is None

