"""
Pipeline components for analytics.

Range resolution and aggregation. Both are pure; only the aggregation
repository touches the database.
"""

__all__ = ["aggregation", "time_range"]
