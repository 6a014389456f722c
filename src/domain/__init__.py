"""Interfaces the price resolver exposes to the rest of the dashboard.

Kept free of HTTP and provider details so callers can depend on the
lookup contract alone and substitute fakes in tests.
"""

__all__ = [
    "pricing",
]
