"""Statistics engine: profiles, regime labels, confirmation and window prediction.

Everything in this package is synchronous and pure. Callers pass a
:class:`~arb_oppity.market.profile.HistoricalProfile` in; nothing here fetches
or caches data.
"""

from .confirmation import MultiTimeframeConfirmer
from .models import BucketKey, ConfirmationResult, PredictedWindow, RegimeResult
from .profile import HistoricalProfile, ProfileBuilder, build_profile, empty_profile
from .regime_classifier import RegimeClassifier
from .stats import DescriptiveStats, compute
from .window_predictor import WindowPredictor

__all__ = [
    "BucketKey",
    "ConfirmationResult",
    "DescriptiveStats",
    "HistoricalProfile",
    "MultiTimeframeConfirmer",
    "PredictedWindow",
    "ProfileBuilder",
    "RegimeClassifier",
    "RegimeResult",
    "WindowPredictor",
    "build_profile",
    "compute",
    "empty_profile",
]
