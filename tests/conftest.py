import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest
from kubernetes.client import V1ConfigMap, V1ObjectMeta
from kubernetes.client.exceptions import ApiException

from pathsched.policy import PathPolicy
from pathsched.source import ConfigMapSource


class FakeCoreV1Api:
    """Stands in for kubernetes.client.CoreV1Api, serving ConfigMaps from a dict."""

    def __init__(self):
        self.config_maps = {}
        self.reads = 0
        self.fail_with = None

    def put(self, namespace, name, data):
        self.config_maps[(namespace, name)] = data

    def read_namespaced_config_map(self, name, namespace):
        self.reads += 1
        if self.fail_with is not None:
            raise self.fail_with
        if (namespace, name) not in self.config_maps:
            raise ApiException(status=404, reason="Not Found")
        return V1ConfigMap(
            metadata=V1ObjectMeta(name=name, namespace=namespace),
            data=self.config_maps[(namespace, name)],
        )


def node_path_doc(*entries):
    return json.dumps({"nodePathMap": [{"node": n, "paths": list(p)} for n, p in entries]})


def node(name):
    return {"apiVersion": "v1", "kind": "Node", "metadata": {"name": name}}


POD = {"metadata": {"name": "web-0", "namespace": "default"}}


@pytest.fixture
def core_api():
    return FakeCoreV1Api()


@pytest.fixture
def make_policy(core_api):
    def _make(doc, **kwargs):
        core_api.put("kube-system", "local-path-config", {"config.json": doc})
        return PathPolicy.new(source=ConfigMapSource(core_api), **kwargs)
    return _make
