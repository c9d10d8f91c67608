"""Telemetry package: logging setup, query events and report storage."""

from .events import QueryEvent
from .logging_setup import JsonFormatter, configure_logging
from .storage import ReportStorage, default_storage, profile_report

__all__ = [
    "JsonFormatter",
    "QueryEvent",
    "ReportStorage",
    "configure_logging",
    "default_storage",
    "profile_report",
]
