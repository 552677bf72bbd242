"""Shared fixtures and helper sources for the test-suite."""

from __future__ import annotations

from .sources import AsyncOnlySource, CountingSource, ExplodingSource, FakeClock

__all__ = ["AsyncOnlySource", "CountingSource", "ExplodingSource", "FakeClock"]
