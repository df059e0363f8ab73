"""Gunicorn configuration for the scheduler extender."""
import os

# Gunicorn config variables
bind = os.getenv("PATHSCHED_BIND", "0.0.0.0:8888")
workers = int(os.getenv("PATHSCHED_WORKERS", "2"))
timeout = 30
worker_class = "sync"
preload_app = False  # each worker loads its own configuration


def post_worker_init(worker):
    """Called just after a worker has initialized the application."""
    policy = worker.wsgi.config.get("path_policy") if hasattr(worker, "wsgi") else None
    if policy is None:
        worker.log.warning(f"[Worker {worker.pid}] path policy not found in app.config")
        return
    worker.log.info(
        f"[Worker {worker.pid}] policy ready, configuration generation {policy.store.generation}"
    )
