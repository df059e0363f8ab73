from __future__ import annotations

import logging

from pathsched import settings
from pathsched.extender import create_app
from pathsched.policy import PathPolicy
from pathsched.source import load_plugin_args

logger = logging.getLogger(__name__)


def build_app(cfg: settings.Settings | None = None):
	"""Build the extender app; fails if the initial configuration cannot be loaded."""
	cfg = cfg or settings.from_env()
	settings.configure_logging(cfg.log_level)

	args = cfg.apply_overrides(load_plugin_args(cfg.args_path))
	policy = PathPolicy.new(
		args,
		min_refresh_interval_s=cfg.min_refresh_interval_s,
		max_score=cfg.max_score,
	)
	logger.info(f"Initialized {policy.name()} with ConfigMap {policy.options.config_map_namespace}/{policy.options.config_map_name}")
	return create_app(policy)


# Build app at module level (for gunicorn)
app = build_app()


if __name__ == "__main__":
	host, _, port = settings.from_env().bind.rpartition(":")
	app.run(host=host or "0.0.0.0", port=int(port))
