"""Ready-made interceptors for common cross-cutting concerns."""

from .audit import AuditInterceptor, AuditSink
from .log import LoggingInterceptor
from .performance import PERFORMANCE_MS, SLOW_OPERATION, PerformanceInterceptor
from .validation import ValidationInterceptor, validate_model

__all__ = [
    "AuditInterceptor",
    "AuditSink",
    "LoggingInterceptor",
    "PERFORMANCE_MS",
    "PerformanceInterceptor",
    "SLOW_OPERATION",
    "ValidationInterceptor",
    "validate_model",
]
