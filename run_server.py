#!/usr/bin/env python
"""
Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py
    Gunicorn:     python run_server.py --gunicorn
"""

import argparse
import subprocess

import uvicorn

from streamdash.config import get_settings

APP_PATH = "streamdash.main:app"


def run_dev_server(port: int) -> None:
    """Run development server with auto-reload."""
    uvicorn.run(
        APP_PATH,
        host="127.0.0.1",
        port=port,
        reload=True,
        reload_dirs=["streamdash"],
        log_level="debug",
    )


def run_prod_server(port: int) -> None:
    """Run Uvicorn with the configured worker count."""
    settings = get_settings()
    uvicorn.run(
        APP_PATH,
        host=settings.api_host,
        port=port,
        workers=settings.api_workers,
        log_level=settings.monitoring.log_level.lower(),
        proxy_headers=True,
        server_header=False,
    )


def run_gunicorn() -> None:
    subprocess.run(["gunicorn", APP_PATH, "-c", "gunicorn.conf.py"], check=True)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Streaming Dashboard Metrics API Server")
    parser.add_argument("--dev", action="store_true", help="Run with auto-reload")
    parser.add_argument("--gunicorn", action="store_true", help="Run under Gunicorn")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    args = parser.parse_args()

    port = args.port or get_settings().api_port
    if args.dev:
        run_dev_server(port)
    elif args.gunicorn:
        run_gunicorn()
    else:
        run_prod_server(port)
