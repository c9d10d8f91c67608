"""Orchestration layer tying the data source, statistics engine and scanner.

``LiquidityService`` is the only component that performs I/O on behalf of a
query: it fetches history and current snapshots through a
:class:`~arb_oppity.data_feed.sources.MarketDataSource`, keeps built profiles
in a caller-owned :class:`~arb_oppity.runtime.ProfileCache` and hands pure
inputs to the classifier, confirmer, predictor and scan engine.

Market ids are the configured pair ids when a pair is known (the venue
identifiers are resolved from ``markets.yml``); any other id is passed to
the data source unchanged. ``DataUnavailable`` from the source propagates to
the caller: the client has already spent its retry budget.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from arb_oppity.config.models import AppConfig, MarketPairConfig
from arb_oppity.core.enums import Category, RegimeLabel, Timeframe, Venue
from arb_oppity.core.errors import ConfigurationError
from arb_oppity.core.time_utils import (
    as_utc,
    day_of_week_of,
    format_offset,
    hour_of,
    is_late_night,
    is_weekend,
    now_utc,
    shift,
)
from arb_oppity.data_feed.sources import FeeService, MarketDataSource
from arb_oppity.market.confirmation import MultiTimeframeConfirmer
from arb_oppity.market.models import ConfirmationResult, PredictedWindow, RegimeResult
from arb_oppity.market.profile import HistoricalProfile, ProfileBuilder
from arb_oppity.market.regime_classifier import RegimeClassifier
from arb_oppity.market.window_predictor import WindowPredictor
from arb_oppity.runtime.profile_cache import ProfileCache
from arb_oppity.scanner.models import ArbAnalysis, ScanReport
from arb_oppity.scanner.scan_engine import ScanEngine
from arb_oppity.telemetry.events import QueryEvent
from arb_oppity.telemetry.storage import ReportStorage

from .models import WIDE_PERCENTILE, LiquidityCheck, MarketForecast

LOGGER = logging.getLogger(__name__)

FORECAST_BEST_HOURS = 3
FORECAST_BEST_DAYS = 2


def recommend(regime: RegimeLabel, off_hours: bool, weekend: bool, tz_offset_hours: float) -> str:
    """Human-readable advice for a regime plus time-of-day context."""

    if regime is RegimeLabel.VERY_THIN:
        return "Excellent conditions - spreads are very wide, check for cross-venue arb immediately"
    if regime is RegimeLabel.THIN:
        return "Good conditions - spreads are wider than normal, favorable for arb entry"
    if regime is RegimeLabel.THICK:
        return "Tight spreads - liquidity is high, wait for better entry"
    if off_hours or weekend:
        return "Normal spreads during off-hours - monitor for widening"
    return (
        "Normal conditions - spreads may widen during off-hours "
        f"(00:00-06:00 {format_offset(tz_offset_hours)}) or weekends"
    )


class LiquidityService:
    """Facade exposing the liquidity analysis operations."""

    def __init__(
        self,
        config: AppConfig,
        data_source: MarketDataSource,
        fee_service: FeeService,
        *,
        cache: ProfileCache | None = None,
        storage: ReportStorage | None = None,
    ) -> None:
        self._config = config
        self._source = data_source
        self._default_timeframe = Timeframe.from_value(config.profile.timeframe)
        self._cache = cache if cache is not None else ProfileCache(
            self._default_timeframe, config.profile.history_days
        )
        self._storage = storage
        self._classifier = RegimeClassifier.from_config(config.regime)
        self._builder = ProfileBuilder(tz_offset_hours=config.profile.tz_offset_hours)
        self._confirmer = MultiTimeframeConfirmer(self._classifier)
        self._predictor = WindowPredictor.from_config(self._classifier, config.predictor)
        self._scanner = ScanEngine.from_config(data_source, fee_service, self._classifier, self._cache, config.scanner)

    @property
    def cache(self) -> ProfileCache:
        return self._cache

    @property
    def classifier(self) -> RegimeClassifier:
        return self._classifier

    @property
    def predictor(self) -> WindowPredictor:
        return self._predictor

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------
    def build_profile(
        self,
        market_id: str,
        *,
        now: datetime | None = None,
        days: int | None = None,
        timeframe: Timeframe | None = None,
    ) -> HistoricalProfile:
        """Fetch history, build a fresh profile and replace the cached one."""

        days = self._config.profile.history_days if days is None else days
        end = as_utc(now or now_utc())
        start = end - timedelta(days=days)
        timeframe = timeframe or self._default_timeframe
        observations = self._source.fetch_observations(self._venue_id(market_id, Venue.KALSHI), start, end, timeframe)
        profile = self._builder.build(market_id, observations, self._category_resolver(market_id))
        self._cache.put(profile, timeframe, days)
        return profile

    def profile(
        self,
        market_id: str,
        *,
        now: datetime | None = None,
        timeframe: Timeframe | None = None,
        days: int | None = None,
    ) -> HistoricalProfile:
        """Cached profile for ``(market_id, timeframe, days)``, built on first use."""

        days = self._config.profile.history_days if days is None else days
        cached = self._cache.get(market_id, timeframe, days)
        if cached is not None:
            return cached
        return self.build_profile(market_id, now=now, days=days, timeframe=timeframe)

    # ------------------------------------------------------------------
    # Regime queries
    # ------------------------------------------------------------------
    def classify(self, market_id: str, *, now: datetime | None = None) -> RegimeResult:
        profile = self.profile(market_id, now=now)
        snapshot = self._source.fetch_current_snapshot(self._venue_id(market_id, Venue.KALSHI), Venue.KALSHI)
        result = self._classifier.classify(snapshot, profile)
        self._record("classify", market_id, result.to_dict(), now)
        return result

    def confirm(self, market_id: str, *, now: datetime | None = None) -> ConfirmationResult:
        """Classify the current snapshot against one profile per configured timeframe."""

        settings = self._config.confirmation
        timeframes = [Timeframe.from_value(value) for value in settings.timeframes]
        profiles = {
            timeframe: self.profile(market_id, now=now, timeframe=timeframe, days=settings.lookback_days)
            for timeframe in timeframes
        }
        snapshot = self._source.fetch_current_snapshot(self._venue_id(market_id, Venue.KALSHI), Venue.KALSHI)
        result = self._confirmer.confirm({timeframe: snapshot for timeframe in timeframes}, profiles)
        LOGGER.info(
            "Confirmation computed",
            extra={
                "market_id": market_id,
                "majority": result.majority.value,
                "agreement": result.agreement,
                "confirmed": result.is_confirmed(settings.min_agreement),
            },
        )
        self._record("confirm", market_id, result.to_dict(), now)
        return result

    def check_liquidity(
        self,
        market_id: str,
        venue: Venue = Venue.KALSHI,
        *,
        now: datetime | None = None,
    ) -> LiquidityCheck:
        moment = as_utc(now or now_utc())
        offset = self._config.profile.tz_offset_hours
        profile = self.profile(market_id, now=moment)
        snapshot = self._source.fetch_current_snapshot(self._venue_id(market_id, venue), venue)
        result = self._classifier.classify(snapshot, profile)
        hour = hour_of(moment, offset)
        off_hours = is_late_night(hour)
        weekend = is_weekend(day_of_week_of(moment))
        check = LiquidityCheck(
            market_id=market_id,
            venue=venue,
            timestamp=moment,
            result=result,
            bid_depth=snapshot.bid_depth,
            ask_depth=snapshot.ask_depth,
            hour=hour,
            is_off_hours=off_hours,
            is_weekend=weekend,
            recommendation=recommend(result.regime, off_hours, weekend, offset),
        )
        self._record("check_liquidity", market_id, check.to_dict(), moment)
        return check

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def predict_next(
        self,
        market_id: str,
        horizon_hours: int | None = None,
        *,
        now: datetime | None = None,
    ) -> PredictedWindow | None:
        moment = as_utc(now or now_utc())
        horizon = self._config.predictor.horizon_hours if horizon_hours is None else horizon_hours
        window = self._predictor.predict_next(self.profile(market_id, now=moment), now=moment, horizon_hours=horizon)
        if window is None:
            LOGGER.info("No thin window predicted", extra={"market_id": market_id, "horizon_hours": horizon})
        return window

    def forecast(
        self,
        market_id: str,
        horizon_hours: int | None = None,
        *,
        now: datetime | None = None,
    ) -> MarketForecast:
        """Predict-mode payload: best slots, next window and how wide the spread is now."""

        moment = as_utc(now or now_utc())
        horizon = self._config.predictor.horizon_hours if horizon_hours is None else horizon_hours
        profile = self.profile(market_id, now=moment)
        window = self._predictor.predict_next(profile, now=moment, horizon_hours=horizon)
        snapshot = self._source.fetch_current_snapshot(self._venue_id(market_id, Venue.KALSHI), Venue.KALSHI)
        current = self._classifier.classify(snapshot, profile)
        forecast = MarketForecast(
            market_id=market_id,
            timestamp=moment,
            best_hours=self._predictor.best_hours(profile, FORECAST_BEST_HOURS),
            best_days=self._predictor.best_days(profile, FORECAST_BEST_DAYS),
            next_window=window,
            current_spread=current.spread,
            average_spread=profile.global_stats.mean,
            spread_percentile=current.percentile_global,
            summary=self._forecast_summary(current.percentile_global, window, horizon, profile.tz_offset_hours),
        )
        self._record("forecast", market_id, forecast.to_dict(), moment)
        return forecast

    @staticmethod
    def _forecast_summary(
        percentile: float,
        window: PredictedWindow | None,
        horizon_hours: int,
        tz_offset_hours: float,
    ) -> str:
        if percentile > WIDE_PERCENTILE:
            return f"Current spread is in the {percentile:.0f}th percentile - WIDER than usual. Consider scanning now."
        if window is None:
            return (
                f"Current spread is normal ({percentile:.0f}th percentile). "
                f"No thin window expected within {horizon_hours}h"
            )
        local_start = shift(window.start, tz_offset_hours)
        return (
            f"Current spread is normal ({percentile:.0f}th percentile). "
            f"Next likely window: {local_start:%H:%M} {format_offset(tz_offset_hours)}"
        )

    # ------------------------------------------------------------------
    # Cross-venue
    # ------------------------------------------------------------------
    def scan_and_rank(
        self,
        market_ids: Iterable[str] | None = None,
        *,
        min_spread_pct: float | None = None,
        min_net_profit_usd: float | None = None,
        size_usd: float | None = None,
        now: datetime | None = None,
    ) -> ScanReport:
        settings = self._config.scanner
        pairs = self._pairs(market_ids)
        report = self._scanner.scan(
            pairs,
            min_spread_pct=settings.min_spread_pct if min_spread_pct is None else min_spread_pct,
            min_net_profit_usd=settings.min_net_profit_usd if min_net_profit_usd is None else min_net_profit_usd,
            size_usd=size_usd or settings.size_usd,
            min_net_profit_pct=settings.min_net_profit_pct,
            now=now,
        )
        self._record("scan", "", {"total_scanned": report.total_scanned, "found": len(report.opportunities)}, now)
        return report

    def analyze_arb(
        self,
        pair: MarketPairConfig | str,
        size_usd: float | None = None,
        min_net_profit_pct: float | None = None,
        *,
        now: datetime | None = None,
    ) -> ArbAnalysis:
        settings = self._config.scanner
        resolved = pair if isinstance(pair, MarketPairConfig) else self._require_pair(pair)
        analysis = self._scanner.analyze_pair(
            resolved,
            size_usd=size_usd or settings.size_usd,
            min_net_profit_pct=settings.min_net_profit_pct if min_net_profit_pct is None else min_net_profit_pct,
            now=now,
        )
        self._record("analyze_arb", resolved.id, analysis.to_dict(), now)
        return analysis

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _pairs(self, market_ids: Iterable[str] | None) -> List[MarketPairConfig]:
        if market_ids is None:
            return list(self._config.markets)
        return [self._require_pair(market_id) for market_id in market_ids]

    def _require_pair(self, market_id: str) -> MarketPairConfig:
        pair = self._config.market(market_id)
        if pair is None:
            raise ConfigurationError(f"Unknown market pair: {market_id}")
        return pair

    def _venue_id(self, market_id: str, venue: Venue) -> str:
        pair = self._config.market(market_id)
        if pair is None:
            return market_id
        return pair.kalshi_ticker if venue is Venue.KALSHI else pair.polymarket_token_id

    def _category_resolver(self, market_id: str):
        pair = self._config.market(market_id)
        if pair is not None and pair.category is not Category.OTHER:
            category = pair.category
            return lambda _source_id: category
        return self._source.category_of

    def _record(self, event_type: str, market_id: str, payload: Dict[str, object], now: datetime | None) -> None:
        if self._storage is None:
            return
        event = QueryEvent(
            timestamp=as_utc(now or now_utc()),
            event_type=event_type,
            market_id=market_id,
            payload=payload,
        )
        self._storage.append_event(event)


__all__ = ["LiquidityService", "recommend"]
