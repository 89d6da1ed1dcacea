"""Query package: filtering and aggregation over loaded collections."""

from finance_tracker.queries.aggregation import compute_stats, round_half_up, summarize_by_category
from finance_tracker.queries.filters import apply_filters, matches, matches_search

__all__ = [
    "apply_filters",
    "compute_stats",
    "matches",
    "matches_search",
    "round_half_up",
    "summarize_by_category",
]
