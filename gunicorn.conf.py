"""
Gunicorn Configuration

Uvicorn workers under Gunicorn. With several workers the in-memory rate
limiter counts per worker; set RATE_LIMIT_BACKEND=redis to share counters.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 10000
max_requests_jitter = 1000
# Report queries time out on their own (REPORTS_QUERY_TIMEOUT_SECONDS)
timeout = 120
keepalive = 5
graceful_timeout = 30

proc_name = "pos-analytics-api"

# Logging
errorlog = "-"
accesslog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
