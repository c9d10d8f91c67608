"""Cross-venue scan: fetch, fee-adjust, score and rank market pairs.

``ScanEngine`` fans the per-pair work out over a thread pool. Pairs are
independent: a pair whose quotes cannot be fetched is logged and skipped
without affecting the others, and the surviving opportunities are sorted by
score afterwards so completion order does not matter.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Sequence, Tuple

from arb_oppity.config.models import MarketPairConfig, ScannerConfig
from arb_oppity.core.enums import ArbAction, RegimeLabel, Venue
from arb_oppity.core.errors import MarketDataError
from arb_oppity.core.time_utils import now_utc
from arb_oppity.data_feed.observations import Observation
from arb_oppity.data_feed.sources import FeeAnalysis, FeeLeg, FeeService, MarketDataSource
from arb_oppity.market.regime_classifier import RegimeClassifier
from arb_oppity.runtime.profile_cache import ProfileCache

from .models import ArbAnalysis, CrossVenueQuote, ScanReport, ScoredOpportunity
from .scoring import score

LOGGER = logging.getLogger(__name__)

NEUTRAL_PERCENTILE = 50.0


def build_legs(quote: CrossVenueQuote, size_usd: float) -> List[FeeLeg]:
    """Buy on the cheaper venue, sell on the richer one."""

    buy_venue = quote.buy_venue
    return [
        FeeLeg(
            venue=venue,
            direction="BUY" if venue is buy_venue else "SELL",
            size_usd=size_usd,
            price=quote.price_on(venue),
        )
        for venue in (Venue.KALSHI, Venue.POLYMARKET)
    ]


def decide_action(is_profitable: bool, gross_spread_pct: float, net_profit_pct: float) -> Tuple[ArbAction, str]:
    """Map profitability and gross spread to EXECUTE / WAIT / SKIP with a reason."""

    if is_profitable and gross_spread_pct >= 3:
        return ArbAction.EXECUTE, (
            f"Strong opportunity: {gross_spread_pct:.1f}% gross spread, {net_profit_pct:.2f}% net profit"
        )
    if is_profitable:
        return ArbAction.EXECUTE, (
            f"Profitable: {gross_spread_pct:.1f}% spread yields {net_profit_pct:.2f}% net after fees"
        )
    if gross_spread_pct >= 1.5:
        return ArbAction.WAIT, (
            f"Borderline: {gross_spread_pct:.1f}% spread but fees make it unprofitable. Wait for >3% spread."
        )
    if gross_spread_pct < 0.5:
        return ArbAction.SKIP, f"No opportunity: {gross_spread_pct:.1f}% spread is too small"
    return ArbAction.SKIP, f"Unprofitable: {gross_spread_pct:.1f}% spread doesn't cover fees"


class ScanEngine:
    """Evaluate configured market pairs and rank the profitable ones."""

    def __init__(
        self,
        data_source: MarketDataSource,
        fee_service: FeeService,
        classifier: RegimeClassifier,
        profiles: ProfileCache,
        *,
        max_workers: int = 4,
    ) -> None:
        self._source = data_source
        self._fees = fee_service
        self._classifier = classifier
        self._profiles = profiles
        self._max_workers = max_workers

    @classmethod
    def from_config(
        cls,
        data_source: MarketDataSource,
        fee_service: FeeService,
        classifier: RegimeClassifier,
        profiles: ProfileCache,
        config: ScannerConfig,
    ) -> "ScanEngine":
        return cls(data_source, fee_service, classifier, profiles, max_workers=config.max_workers)

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------
    def scan(
        self,
        pairs: Sequence[MarketPairConfig],
        *,
        min_spread_pct: float,
        min_net_profit_usd: float,
        size_usd: float,
        min_net_profit_pct: float = 0.5,
        now: datetime | None = None,
    ) -> ScanReport:
        timestamp = now or now_utc()
        opportunities: List[ScoredOpportunity] = []
        skipped: List[Tuple[str, str]] = []

        def _evaluate(pair: MarketPairConfig) -> ScoredOpportunity | None:
            return self.evaluate_pair(
                pair,
                min_spread_pct=min_spread_pct,
                min_net_profit_usd=min_net_profit_usd,
                size_usd=size_usd,
                min_net_profit_pct=min_net_profit_pct,
            )

        if pairs:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(pairs))) as pool:
                futures = [(pair, pool.submit(_evaluate, pair)) for pair in pairs]
                for pair, future in futures:
                    try:
                        result = future.result()
                    except MarketDataError as exc:
                        LOGGER.warning("Skipping %s: %s", pair.id, exc)
                        skipped.append((pair.id, str(exc)))
                        continue
                    if result is not None:
                        opportunities.append(result)

        opportunities.sort(key=lambda item: (-item.score, -item.net_profit_usd, item.market_id))
        if opportunities:
            best = opportunities[0]
            summary = (
                f"Found {len(opportunities)} opportunities. "
                f"Best: {best.market_id} with {best.net_profit_pct:.2f}% net profit"
            )
        else:
            summary = (
                f"No opportunities found above {min_spread_pct:g}% spread / "
                f"${min_net_profit_usd:g} profit threshold"
            )
        LOGGER.info(
            "Scan complete",
            extra={"scanned": len(pairs), "opportunities": len(opportunities), "skipped": len(skipped)},
        )
        return ScanReport(
            timestamp=timestamp,
            opportunities=opportunities,
            total_scanned=len(pairs),
            skipped=skipped,
            summary=summary,
        )

    def evaluate_pair(
        self,
        pair: MarketPairConfig,
        *,
        min_spread_pct: float,
        min_net_profit_usd: float,
        size_usd: float,
        min_net_profit_pct: float = 0.5,
    ) -> ScoredOpportunity | None:
        """Return the scored opportunity for ``pair`` or ``None`` below thresholds."""

        kalshi, polymarket = self.fetch_pair(pair)
        quote = CrossVenueQuote(kalshi_price=kalshi.mid_price, polymarket_price=polymarket.mid_price)
        if quote.buy_price <= 0:
            LOGGER.debug("No two-sided quote for %s", pair.id)
            return None
        gross_spread_pct = quote.gross_spread_pct
        if gross_spread_pct < min_spread_pct:
            return None

        analysis = self._analyze(quote, size_usd, min_net_profit_pct)
        if analysis.net_profit_usd < min_net_profit_usd:
            return None

        regime, percentile = self._liquidity_context(pair, kalshi)
        buy_venue = quote.buy_venue
        buy_side = kalshi if buy_venue is Venue.KALSHI else polymarket
        sell_side = polymarket if buy_venue is Venue.KALSHI else kalshi
        return ScoredOpportunity(
            market_id=pair.id,
            kalshi_ticker=pair.kalshi_ticker,
            polymarket_token_id=pair.polymarket_token_id,
            kalshi_price=quote.kalshi_price,
            polymarket_price=quote.polymarket_price,
            gross_spread_pct=gross_spread_pct,
            total_fees_usd=analysis.total_fees_usd,
            net_profit_usd=analysis.net_profit_usd,
            net_profit_pct=analysis.net_profit_pct,
            buy_venue=buy_venue,
            sell_venue=buy_venue.other,
            liquidity_regime=regime,
            spread_percentile=percentile,
            score=score(analysis.net_profit_pct, percentile, sell_side.bid_depth, buy_side.ask_depth),
        )

    # ------------------------------------------------------------------
    # Single pair analysis
    # ------------------------------------------------------------------
    def analyze_pair(
        self,
        pair: MarketPairConfig,
        *,
        size_usd: float,
        min_net_profit_pct: float,
        now: datetime | None = None,
    ) -> ArbAnalysis:
        kalshi, polymarket = self.fetch_pair(pair)
        quote = CrossVenueQuote(kalshi_price=kalshi.mid_price, polymarket_price=polymarket.mid_price)
        gross_spread_pct = quote.gross_spread_pct
        gross_profit_usd = size_usd * gross_spread_pct / 100.0
        analysis = self._analyze(quote, size_usd, min_net_profit_pct)
        fees_pct = analysis.total_fees_usd / gross_profit_usd * 100.0 if gross_profit_usd > 0 else 100.0
        action, reason = decide_action(analysis.is_profitable, gross_spread_pct, analysis.net_profit_pct)
        return ArbAnalysis(
            timestamp=now or now_utc(),
            size_usd=size_usd,
            kalshi_price=quote.kalshi_price,
            polymarket_price=quote.polymarket_price,
            price_diff=quote.price_diff,
            gross_spread_pct=gross_spread_pct,
            gross_profit_usd=gross_profit_usd,
            kalshi_fee_usd=analysis.fee_for(Venue.KALSHI),
            polymarket_fee_usd=analysis.fee_for(Venue.POLYMARKET),
            total_fees_usd=analysis.total_fees_usd,
            fees_as_pct_of_gross=fees_pct,
            net_profit_usd=analysis.net_profit_usd,
            net_profit_pct=analysis.net_profit_pct,
            is_profitable=analysis.is_profitable,
            buy_venue=quote.buy_venue,
            sell_venue=quote.buy_venue.other,
            action=action,
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def fetch_pair(self, pair: MarketPairConfig) -> Tuple[Observation, Observation]:
        kalshi = self._source.fetch_current_snapshot(pair.kalshi_ticker, Venue.KALSHI)
        polymarket = self._source.fetch_current_snapshot(pair.polymarket_token_id, Venue.POLYMARKET)
        return kalshi, polymarket

    def _analyze(self, quote: CrossVenueQuote, size_usd: float, min_net_profit_pct: float) -> FeeAnalysis:
        gross_profit_usd = size_usd * quote.gross_spread_pct / 100.0
        return self._fees.analyze_arbitrage(build_legs(quote, size_usd), gross_profit_usd, min_net_profit_pct)

    def _liquidity_context(self, pair: MarketPairConfig, observation: Observation) -> Tuple[RegimeLabel, float]:
        """Regime and global spread percentile; neutral when no profile is cached."""

        profile = self._profiles.get(pair.id)
        if profile is None or not profile.has_baseline:
            return RegimeLabel.NORMAL, NEUTRAL_PERCENTILE
        result = self._classifier.classify(observation, profile)
        return result.regime, result.percentile_global


__all__ = ["ScanEngine", "build_legs", "decide_action"]
