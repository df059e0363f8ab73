"""kube-scheduler HTTP extender exposing the path policy."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from pathsched.framework import Code, NodeListError, NodeSnapshot, pod_key
from pathsched.policy import PathPolicy

logger = logging.getLogger(__name__)

# kube-scheduler's extender priority range is 0..10
MAX_EXTENDER_PRIORITY = 10


def normalize_scores(raw: Dict[str, int], max_priority: int = MAX_EXTENDER_PRIORITY) -> Dict[str, int]:
	"""Scale raw scores onto 0..max_priority relative to the highest one."""
	highest = max(raw.values(), default=0)
	if highest <= 0:
		return {name: 0 for name in raw}
	return {name: max(0, score) * max_priority // highest for name, score in raw.items()}


def create_app(policy: PathPolicy) -> Flask:
	app = Flask(__name__)
	app.config['path_policy'] = policy

	def _read_args() -> Optional[Dict[str, Any]]:
		body = request.get_json(force=True, silent=True)
		return body if isinstance(body, dict) else None

	@app.post("/filter")
	def filter_nodes() -> Any:
		policy = app.config['path_policy']
		body = _read_args()
		if body is None:
			return jsonify({"error": "request body must be an ExtenderArgs object"}), 400
		try:
			snapshot = NodeSnapshot.from_extender_args(body)
		except NodeListError as e:
			return jsonify({"error": str(e)}), 400

		pod = body.get("pod") or {}
		want_items = body.get("nodes") is not None
		passed: List[Any] = []
		failed: Dict[str, str] = {}

		decision = policy.pre_filter(pod, snapshot)
		if decision.code is Code.ERROR:
			logger.error(f"PreFilter failed for pod {pod_key(pod)}: {decision.reason}")
			return jsonify({
				"nodes": None,
				"nodenames": None,
				"failedNodes": {},
				"error": decision.reason,
			})

		for info in snapshot.list():
			if info.name is None:
				logger.warning(f"Skipping node without a name for pod {pod_key(pod)}")
				continue
			if decision.code is Code.UNSCHEDULABLE:
				failed[info.name] = decision.reason
				continue
			result = policy.filter(pod, info)
			if result.is_success():
				passed.append(info)
			else:
				if result.code is Code.ERROR:
					logger.error(f"Filter error for pod {pod_key(pod)} on node {info.name}: {result.reason}")
				failed[info.name] = result.reason

		logger.info(f"Filtered pod {pod_key(pod)}: {len(passed)} passed, {len(failed)} failed")
		return jsonify({
			"nodes": {"items": [info.node for info in passed]} if want_items else None,
			"nodenames": [info.name for info in passed],
			"failedNodes": failed,
			"error": "",
		})

	@app.post("/prioritize")
	def prioritize_nodes() -> Any:
		policy = app.config['path_policy']
		body = _read_args()
		if body is None:
			return jsonify({"error": "request body must be an ExtenderArgs object"}), 400
		try:
			snapshot = NodeSnapshot.from_extender_args(body)
		except NodeListError as e:
			return jsonify({"error": str(e)}), 400

		pod = body.get("pod") or {}
		raw: Dict[str, int] = {}
		for info in snapshot.list():
			if info.name is None:
				continue
			score, decision = policy.score(pod, info.name, snapshot)
			if not decision.is_success():
				logger.error(f"Score error for pod {pod_key(pod)} on node {info.name}: {decision.reason}")
				score = 0
			raw[info.name] = score

		priorities = normalize_scores(raw)
		return jsonify([{"host": name, "score": priorities[name]} for name in raw])

	@app.get("/healthz")
	def healthz() -> Any:
		policy = app.config['path_policy']
		return jsonify({"status": "ok", "generation": policy.store.generation})

	@app.get("/config")
	def current_config() -> Any:
		policy = app.config['path_policy']
		config = policy.store.current()
		return jsonify({
			"source": policy.options.to_dict(),
			"generation": policy.store.generation,
			"config": config.to_dict(),
			"hasDefaultPath": config.has_default_path(),
		})

	return app
