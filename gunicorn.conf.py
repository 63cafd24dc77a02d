import logging.config
import multiprocessing
import os
import re

import structlog

workers = int(os.environ.get("GUNICORN_WORKERS", min(multiprocessing.cpu_count() * 2 + 1, 8)))
worker_class = "sync"
timeout = int(os.environ.get("GUNICORN_TIMEOUT", 60))
graceful_timeout = 30
keepalive = 5
# recycle workers to bound memory growth
max_requests = 1000
max_requests_jitter = 50
preload_app = True

loglevel = os.environ.get("GUNICORN_LOG_LEVEL", "info")
errorlog = "-"
accesslog = "-"
# 10.0.0.1 - - [19/Oct/2026:09:12:01 +0000] "POST /api/applications/ HTTP/1.1" 201 88 0.041
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(L)s'

ACCESS_LINE = re.compile(
    r'(?P<remote>\S+) \S+ (?P<user>\S+) \[(?P<time>[^\]]+)\] '
    r'"(?P<method>\S+) (?P<path>\S+) (?P<protocol>[^"]+)" '
    r'(?P<status>\d{3}) (?P<size>\S+) (?P<duration>[\d.]+)'
)


def parse_access_line(logger, name, event_dict):
    """Éclate la ligne d'accès gunicorn en champs structurés."""
    if event_dict.get("logger") != "gunicorn.access":
        return event_dict
    match = ACCESS_LINE.match(str(event_dict.get("event", "")))
    if match is None:
        return event_dict

    fields = match.groupdict()
    event_dict.update(
        event="http.request",
        remote=fields["remote"],
        user=None if fields["user"] == "-" else fields["user"],
        method=fields["method"],
        path=fields["path"],
        status=int(fields["status"]),
        size=0 if fields["size"] == "-" else int(fields["size"]),
        duration_s=float(fields["duration"]),
    )
    return event_dict


def rename_boot_events(logger, name, event_dict):
    if event_dict.get("logger") == "gunicorn.error":
        event = str(event_dict.get("event", ""))
        if event.lower().startswith(("starting", "listening", "booting", "using")):
            event_dict["message"] = event
            event_dict["event"] = "gunicorn.boot"
    return event_dict


foreign_pre_chain = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    parse_access_line,
    rename_boot_events,
]

logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "logfmt": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.processors.LogfmtRenderer(),
            "foreign_pre_chain": foreign_pre_chain,
        },
    },
    "handlers": {
        "stdout": {"class": "logging.StreamHandler", "formatter": "logfmt"},
    },
    "root": {"level": "INFO", "handlers": ["stdout"]},
    "loggers": {
        "gunicorn.error": {"level": "INFO", "handlers": ["stdout"], "propagate": False},
        "gunicorn.access": {"level": "INFO", "handlers": ["stdout"], "propagate": False},
    },
}

logging.config.dictConfig(logconfig_dict)
