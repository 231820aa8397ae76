"""Service package for the companion agents."""

from .config import AppSettings, FallbackPolicy, ObservabilitySettings, load_settings
from .observability import configure_logging, MetricsEmitter, RunTracer

__all__ = [
    "AppSettings",
    "FallbackPolicy",
    "ObservabilitySettings",
    "load_settings",
    "configure_logging",
    "MetricsEmitter",
    "RunTracer",
]
