#!/usr/bin/env python
"""
Server Entry Point

    python run_server.py --dev         # auto-reload on 127.0.0.1
    python run_server.py               # uvicorn with API_WORKERS workers
    python run_server.py --gunicorn    # gunicorn + uvicorn workers

Host, port, workers and log level default to the API_* and LOG_LEVEL settings.
"""

import argparse
import os

import uvicorn

from src.config import get_settings

APP = "src.main:app"


def parse_args(argv=None) -> argparse.Namespace:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Restaurant Analytics API server")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dev", action="store_true", help="Development mode with auto-reload")
    mode.add_argument("--gunicorn", action="store_true", help="Run under gunicorn")
    parser.add_argument("--host", default=settings.api_host, help=f"Bind host (default: {settings.api_host})")
    parser.add_argument("--port", type=int, default=settings.api_port, help=f"Port (default: {settings.api_port})")
    parser.add_argument("--workers", type=int, default=settings.api_workers, help="Worker processes")
    return parser.parse_args(argv)


def run_uvicorn(args: argparse.Namespace) -> None:
    settings = get_settings()

    if args.dev:
        uvicorn.run(APP, host="127.0.0.1", port=args.port, reload=True, reload_dirs=["src"], log_config=None)
        return

    uvicorn.run(
        APP,
        host=args.host,
        port=args.port,
        workers=args.workers,
        log_config=None,
        log_level=settings.monitoring.log_level.lower(),
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


def run_gunicorn(args: argparse.Namespace) -> None:
    os.environ["BIND"] = f"{args.host}:{args.port}"
    os.environ["WORKERS"] = str(args.workers)
    os.execvp("gunicorn", ["gunicorn", APP, "-c", "gunicorn.conf.py"])


if __name__ == "__main__":
    arguments = parse_args()
    if arguments.gunicorn:
        run_gunicorn(arguments)
    else:
        run_uvicorn(arguments)
