"""
Moving-average pipeline over histogram buckets.

Smooths an ordered bucket sequence with one of five models (simple, linear,
ewma, holt, holt_winters) and optionally appends forecast buckets.
"""
from __future__ import annotations

__version__ = "0.1.0"
