"""Diagnostics package.

- round_trip, pretty_month: always available, light-weight checks
- year_drift: needs the diagnostics extras (numpy, optionally matplotlib)
"""

__all__ = ["pretty_month", "round_trip", "year_drift"]
