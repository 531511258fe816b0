"""
Gunicorn configuration for the dashboard API.

Uvicorn workers; each worker keeps its own Redis pool and snapshot loader.
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")
workers = int(os.getenv("API_WORKERS", multiprocessing.cpu_count() + 1))
worker_class = "uvicorn.workers.UvicornWorker"

# Dashboards over large snapshots can take a while on a cold cache
timeout = 180
graceful_timeout = 30
keepalive = 5
max_requests = 5000
max_requests_jitter = 500

proc_name = "streaming-dashboard-metrics"

errorlog = "-"
accesslog = None
loglevel = os.getenv("LOG_LEVEL", "info").lower()
