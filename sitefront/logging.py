"""
Structured logging and in-process metrics for the tenant front end.

Every log line carries the request id and, inside a tenant scope, the site
id, hostname and base path, so one tenant's traffic can be followed through
domain check, routing and rendering.
"""
import logging
import json
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone
from contextvars import ContextVar
import asyncio

from .config import get_settings

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
# Set by base_path_provider() for the duration of one tenant render
tenant_var: ContextVar[Optional[Dict[str, str]]] = ContextVar('tenant', default=None)

SLOW_REQUEST_SECONDS = 1.0
HISTOGRAM_WINDOW = 1000


def context_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Request, tenant and call-site fields attached to a record"""
    fields: Dict[str, Any] = {}
    request_id = request_id_var.get()
    if request_id:
        fields['request_id'] = request_id
    fields.update(tenant_var.get() or {})
    fields.update(getattr(record, 'extra_fields', {}))
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(context_fields(record))
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """key=value fields after the usual prefix, for local development"""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = context_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


class SiteLogger:
    """Logger taking structured fields as keyword arguments"""

    def __init__(self, name: str):
        settings = get_settings()
        self.logger = logging.getLogger(name)
        self.logger.setLevel(settings.log_level)
        self.logger.propagate = False

        # Re-importing must not stack handlers
        self.logger.handlers = []
        handler = logging.StreamHandler()
        if settings.log_format == "text":
            handler.setFormatter(TextFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        else:
            handler.setFormatter(StructuredFormatter())
        self.logger.addHandler(handler)

    def _log(self, level: int, message: str, **fields):
        self.logger.log(level, message, extra={'extra_fields': fields})

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, **fields)


logger = SiteLogger('sitefront')


def _percentile(ordered: List[float], fraction: float) -> float:
    return ordered[min(len(ordered) - 1, int(len(ordered) * fraction))]


class Metrics:
    """
    Counters, gauges and windowed histograms keyed by name plus sorted labels,
    e.g. ``renders_total{site_type=news,template=home_news.html}``.
    """

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.gauges: Dict[str, float] = {}
        self.histograms: Dict[str, List[float]] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def key(name: str, labels: Optional[Dict[str, str]] = None) -> str:
        if not labels:
            return name
        return name + "{" + ",".join(f"{k}={v}" for k, v in sorted(labels.items())) + "}"

    async def increment(self, name: str, value: int = 1, labels: Optional[Dict[str, str]] = None):
        key = self.key(name, labels)
        async with self._lock:
            self.counters[key] = self.counters.get(key, 0) + value

    async def set_gauge(self, name: str, value: float, labels: Optional[Dict[str, str]] = None):
        key = self.key(name, labels)
        async with self._lock:
            self.gauges[key] = value

    async def observe(self, name: str, value: float, labels: Optional[Dict[str, str]] = None):
        key = self.key(name, labels)
        async with self._lock:
            window = self.histograms.setdefault(key, [])
            window.append(value)
            del window[:-HISTOGRAM_WINDOW]

    async def get_summary(self) -> Dict[str, Any]:
        async with self._lock:
            histograms = {}
            for key, values in self.histograms.items():
                ordered = sorted(values)
                histograms[key] = {
                    'count': len(ordered),
                    'min': ordered[0],
                    'max': ordered[-1],
                    'avg': sum(ordered) / len(ordered),
                    'p50': _percentile(ordered, 0.5),
                    'p99': _percentile(ordered, 0.99),
                }
            return {
                'counters': dict(self.counters),
                'gauges': dict(self.gauges),
                'histograms': histograms,
            }


metrics = Metrics()


class RequestTracker:
    """In-flight request gauge, latency histogram and slow-request warnings"""

    def __init__(self, slow_threshold: float = SLOW_REQUEST_SECONDS):
        self.active_requests = 0
        self.slow_threshold = slow_threshold
        self._lock = asyncio.Lock()

    async def _adjust(self, delta: int) -> int:
        async with self._lock:
            self.active_requests += delta
            active = self.active_requests
        await metrics.set_gauge("active_requests", active)
        return active

    async def start_request(self, request_id: str, host: str, path: str, method: str):
        active = await self._adjust(1)
        await metrics.increment("http_requests_total", labels={"method": method})
        logger.debug("Request started", request_id=request_id, host=host, path=path,
                     method=method, active_requests=active)

    async def end_request(self, request_id: str, host: str, path: str, method: str,
                          status_code: int, duration: float):
        await self._adjust(-1)
        await metrics.observe("http_request_duration_seconds", duration, labels={
            "method": method,
            "status": str(status_code),
        })

        fields = dict(request_id=request_id, host=host, path=path, method=method,
                      status_code=status_code, duration=round(duration, 4))
        if duration >= self.slow_threshold:
            await metrics.increment("http_slow_requests_total")
            logger.warning("Slow request", **fields)
        else:
            logger.info("Request completed", **fields)


request_tracker = RequestTracker()
