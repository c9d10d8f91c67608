"""Error hierarchy shared by the subsystems.

Centralizing exception types makes it easier for orchestrators to distinguish
between configuration mistakes (fail fast at construction), data problems
(propagated to the caller, skipped during scans) and inconsistent analysis
inputs. Submodules should raise the most specific error available.
"""
from __future__ import annotations


class CoreError(Exception):
    """Base class for all custom exceptions in the application."""


class ConfigurationError(CoreError):
    """Raised when configuration files are missing or invalid."""


class InvalidConfiguration(ConfigurationError, ValueError):
    """Raised when threshold values are out of logical order."""


class MarketDataError(CoreError):
    """Raised for failures while fetching or parsing market data."""


class DataUnavailable(MarketDataError):
    """Raised when a venue has no data for the requested market or range."""


class AnalysisError(CoreError):
    """Raised when analysis inputs are inconsistent with each other."""


class InsufficientData(CoreError):
    """Marks a baseline built from too few samples.

    The statistics engine never raises this: empty buckets degrade to zero
    stats with ``low`` confidence. Callers that want a hard failure for thin
    baselines raise it themselves.
    """


class TelemetryError(CoreError):
    """Raised for logging/report persistence issues."""
