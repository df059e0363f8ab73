"""Scheduling decisions, node snapshots and extension-point interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


class Code(Enum):
	"""Outcome of an extension point."""
	SUCCESS = "Success"
	UNSCHEDULABLE = "Unschedulable"
	ERROR = "Error"


@dataclass(frozen=True)
class Decision:
	"""Status returned to the host scheduler for one pod (and node)."""
	code: Code
	reason: str = ""

	@classmethod
	def success(cls) -> "Decision":
		return cls(Code.SUCCESS)

	@classmethod
	def unschedulable(cls, reason: str) -> "Decision":
		return cls(Code.UNSCHEDULABLE, reason)

	@classmethod
	def error(cls, reason: str) -> "Decision":
		return cls(Code.ERROR, reason)

	def is_success(self) -> bool:
		return self.code is Code.SUCCESS


class NodeNotFoundError(LookupError):
	"""Node is not part of the current snapshot."""


class NodeListError(ValueError):
	"""The host sent a node list that cannot be interpreted."""


def pod_key(pod: Optional[Mapping[str, Any]]) -> str:
	"""namespace/name of a pod object, for log lines."""
	if not isinstance(pod, Mapping):
		return "<unknown>"
	meta = pod.get("metadata") or {}
	return f"{meta.get('namespace') or 'default'}/{meta.get('name') or '<unnamed>'}"


@dataclass
class NodeInfo:
	"""A node object as handed over by the host scheduler (may be missing)."""
	node: Optional[Dict[str, Any]]

	@property
	def name(self) -> Optional[str]:
		if not isinstance(self.node, Mapping):
			return None
		meta = self.node.get("metadata")
		if not isinstance(meta, Mapping):
			return None
		name = meta.get("name")
		if not isinstance(name, str) or not name:
			return None
		return name


class NodeSnapshot:
	"""Nodes visible to one scheduling attempt."""

	def __init__(self, nodes: Iterable[NodeInfo] = ()) -> None:
		self._nodes: List[NodeInfo] = list(nodes)
		self._by_name: Dict[str, NodeInfo] = {}
		for info in self._nodes:
			if info.name is not None and info.name not in self._by_name:
				self._by_name[info.name] = info

	@classmethod
	def from_names(cls, names: Iterable[str]) -> "NodeSnapshot":
		return cls(NodeInfo({"metadata": {"name": n}}) for n in names)

	@classmethod
	def from_extender_args(cls, args: Mapping[str, Any]) -> "NodeSnapshot":
		"""
		Build a snapshot from an ExtenderArgs request body.

		Full node objects (nodes.items) win over bare names (nodenames),
		which is what cache-capable extenders receive.
		"""
		if not isinstance(args, Mapping):
			raise NodeListError("extender args must be an object")

		nodes = args.get("nodes")
		if nodes is not None:
			if not isinstance(nodes, Mapping):
				raise NodeListError("nodes must be a NodeList object")
			items = nodes.get("items") or []
			if not isinstance(items, list):
				raise NodeListError("nodes.items must be a list")
			return cls(NodeInfo(item if isinstance(item, dict) else None) for item in items)

		names = args.get("nodenames")
		if names is None:
			return cls()
		if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
			raise NodeListError("nodenames must be a list of strings")
		return cls.from_names(names)

	def list(self) -> List[NodeInfo]:
		return list(self._nodes)

	def get(self, name: str) -> NodeInfo:
		try:
			return self._by_name[name]
		except KeyError:
			raise NodeNotFoundError(f"node {name!r} not found") from None

	def __len__(self) -> int:
		return len(self._nodes)


class Plugin(ABC):
	@abstractmethod
	def name(self) -> str:
		raise NotImplementedError


class PreFilterPlugin(Plugin):
	@abstractmethod
	def pre_filter(self, pod: Mapping[str, Any], snapshot: NodeSnapshot) -> Decision:
		raise NotImplementedError

	def pre_filter_extensions(self) -> None:
		return None


class FilterPlugin(Plugin):
	@abstractmethod
	def filter(self, pod: Mapping[str, Any], node_info: NodeInfo) -> Decision:
		raise NotImplementedError


class ScorePlugin(Plugin):
	@abstractmethod
	def score(self, pod: Mapping[str, Any], node_name: str, snapshot: NodeSnapshot) -> Tuple[int, Decision]:
		raise NotImplementedError

	def score_extensions(self) -> None:
		return None


class ReservePlugin(Plugin):
	@abstractmethod
	def reserve(self, pod: Mapping[str, Any], node_name: str) -> Decision:
		raise NotImplementedError

	@abstractmethod
	def unreserve(self, pod: Mapping[str, Any], node_name: str) -> None:
		raise NotImplementedError
