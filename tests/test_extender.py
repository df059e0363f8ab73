import pytest

from conftest import POD, node, node_path_doc
from pathsched.config import DEFAULT_NODE_PATH
from pathsched.extender import create_app, normalize_scores


@pytest.fixture
def client_for(make_policy):
    def _client(doc):
        return create_app(make_policy(doc)).test_client()
    return _client


def test_filter_splits_nodes(client_for):
    client = client_for(node_path_doc(("node-a", ["/data1"])))

    resp = client.post("/filter", json={"pod": POD, "nodes": {"items": [node("node-a"), node("node-b")]}})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["nodenames"] == ["node-a"]
    assert [n["metadata"]["name"] for n in data["nodes"]["items"]] == ["node-a"]
    assert data["failedNodes"] == {"node-b": "node is not in the allowed nodes list"}
    assert data["error"] == ""


def test_filter_with_node_names_only(client_for):
    client = client_for(node_path_doc((DEFAULT_NODE_PATH, [])))

    data = client.post("/filter", json={"pod": POD, "nodenames": ["n1", "n2"]}).get_json()

    assert data["nodenames"] == ["n1", "n2"]
    assert data["nodes"] is None
    assert data["failedNodes"] == {}


def test_filter_fails_every_node_when_nothing_matches(client_for):
    client = client_for('{"nodePathMap": []}')

    data = client.post("/filter", json={"pod": POD, "nodenames": ["n1", "n2"]}).get_json()

    assert data["nodenames"] == []
    assert data["failedNodes"] == {
        "n1": "no nodes match the path configuration",
        "n2": "no nodes match the path configuration",
    }


def test_filter_rejects_bad_bodies(client_for):
    client = client_for(node_path_doc(("node-a", [])))

    assert client.post("/filter", data="nope", content_type="application/json").status_code == 400
    assert client.post("/filter", json={"nodenames": "node-a"}).status_code == 400


def test_prioritize_scales_to_extender_range(client_for):
    client = client_for(node_path_doc(("node-a", ["/d1", "/d2", "/d3", "/d4", "/d5"]), ("node-b", [])))

    resp = client.post("/prioritize", json={"pod": POD, "nodenames": ["node-a", "node-b"]})

    assert resp.status_code == 200
    assert resp.get_json() == [{"host": "node-a", "score": 10}, {"host": "node-b", "score": 5}]


def test_normalize_scores():
    assert normalize_scores({"a": 70, "b": 50}) == {"a": 10, "b": 7}
    assert normalize_scores({"a": 0}) == {"a": 0}
    assert normalize_scores({}) == {}


def test_healthz_and_config(client_for):
    client = client_for(node_path_doc(("node-a", ["/data1"])))

    health = client.get("/healthz").get_json()
    assert health == {"status": "ok", "generation": 1}

    data = client.get("/config").get_json()
    assert data["config"] == {"nodePathMap": [{"node": "node-a", "paths": ["/data1"]}]}
    assert data["source"]["configMapName"] == "local-path-config"
    assert data["hasDefaultPath"] is False
