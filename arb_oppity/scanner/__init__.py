"""Cross-venue scanning and opportunity ranking."""

from .models import ArbAnalysis, CrossVenueQuote, ScanReport, ScoredOpportunity
from .scan_engine import ScanEngine, decide_action
from .scoring import score

__all__ = [
    "ArbAnalysis",
    "CrossVenueQuote",
    "ScanEngine",
    "ScanReport",
    "ScoredOpportunity",
    "decide_action",
    "score",
]
