"""Observability: token usage tracking."""

from .usage import UsageEntry, UsageSummary, UsageTracker

__all__ = ["UsageEntry", "UsageSummary", "UsageTracker"]
