"""
uptime_prober - Periodic liveness probe for remote HTTP endpoints.
"""

__version__ = "0.1.0"
