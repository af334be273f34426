"""
Health module - Liveness probe for remote HTTP endpoints.

This module probes configured targets, classifies each as healthy or
unhealthy, alerts on unhealthy ones and appends every run to a
date-partitioned log.
"""

from uptime_prober.health.config import load_config
from uptime_prober.health.runner import run_health_check, run_sweep

__all__ = ["load_config", "run_health_check", "run_sweep"]
