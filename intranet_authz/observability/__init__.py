"""Observability layer: in-process metrics. No external SaaS."""

from intranet_authz.observability.metrics import MetricsCollector

__all__ = ["MetricsCollector"]
