"""
Gunicorn Configuration

Runs the analytics API under Uvicorn workers:
    gunicorn src.main:app -c gunicorn.conf.py

Bind address and worker count come from API_HOST, API_PORT and API_WORKERS,
with BIND and WORKERS taking precedence when set.
"""

import os

from src.config import get_settings

_settings = get_settings()

bind = os.getenv("BIND", f"{_settings.api_host}:{_settings.api_port}")
workers = int(os.getenv("WORKERS", _settings.api_workers))
worker_class = "uvicorn.workers.UvicornWorker"

timeout = 60
graceful_timeout = 30
keepalive = 5
max_requests = 5000
max_requests_jitter = 500

proc_name = _settings.app_name

# Access lines come from RequestLoggingMiddleware
errorlog = "-"
loglevel = _settings.monitoring.log_level.lower()
accesslog = None


def post_worker_init(worker):
    """Route each worker's logging through structlog."""
    from src.config.logging import configure_logging

    configure_logging()
