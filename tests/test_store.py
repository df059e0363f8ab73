import threading

import pytest

from conftest import node_path_doc
from pathsched.config import Configuration, MalformedConfigError
from pathsched.store import ConfigStore


def test_store_starts_empty():
    store = ConfigStore()

    assert store.current() == Configuration()
    assert store.generation == 0
    assert not store.is_node_allowed("node-a")


def test_replace_swaps_whole_snapshot():
    store = ConfigStore()
    store.replace(node_path_doc(("node-a", ["/data1"])))
    store.replace(node_path_doc(("node-b", ["/data2"])))

    assert store.generation == 2
    assert not store.is_node_allowed("node-a")
    assert store.paths_for("node-b") == ("/data2",)
    assert store.paths_for("node-a") is None


def test_malformed_replace_keeps_previous_snapshot():
    store = ConfigStore()
    before = store.replace(node_path_doc(("node-a", ["/data1"])))

    with pytest.raises(MalformedConfigError):
        store.replace("{broken")

    assert store.current() is before
    assert store.generation == 1


def test_readers_never_see_a_torn_snapshot():
    store = ConfigStore()
    docs = [
        node_path_doc(("node-a", ["/a"]), ("node-b", ["/b"])),
        node_path_doc(("node-c", ["/c"]), ("node-d", ["/d"])),
    ]
    valid = {("node-a", "node-b"), ("node-c", "node-d")}
    store.replace(docs[0])
    stop = threading.Event()
    torn = []

    def reader():
        while not stop.is_set():
            names = tuple(e.node for e in store.current().entries)
            if names not in valid:
                torn.append(names)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for i in range(500):
        store.replace(docs[i % 2])
    stop.set()
    for t in threads:
        t.join(timeout=5)

    assert not torn
