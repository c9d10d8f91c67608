from __future__ import annotations

import pytest

from arb_oppity.config.models import FeesConfig
from arb_oppity.core.enums import Venue
from arb_oppity.data_feed.fees import ScheduleFeeService, kalshi_fee, polymarket_fee
from arb_oppity.data_feed.sources import FeeLeg, FeeService


def test_kalshi_fee_rounds_up_to_cent() -> None:
    # 1000 / 0.5 = 2000 contracts * 0.07 * 0.25 = 35.00
    assert kalshi_fee(1000.0, 0.5, 0.07) == pytest.approx(35.0)
    # 10 / 0.3 contracts * 0.07 * 0.3 * 0.7 = 0.147 -> 0.15
    assert kalshi_fee(10.0, 0.3, 0.07) == pytest.approx(0.15)
    assert kalshi_fee(100.0, 0.0, 0.07) == 0.0


def test_polymarket_fee_is_bps_plus_gas() -> None:
    assert polymarket_fee(1000.0, 1.0, 0.05) == pytest.approx(0.15)
    assert polymarket_fee(0.0, 1.0, 0.05) == 0.0


def test_schedule_service_analysis() -> None:
    service = ScheduleFeeService(FeesConfig())
    assert isinstance(service, FeeService)
    legs = [
        FeeLeg(venue=Venue.KALSHI, direction="BUY", size_usd=1000.0, price=0.5),
        FeeLeg(venue=Venue.POLYMARKET, direction="SELL", size_usd=1000.0, price=0.6),
    ]
    analysis = service.analyze_arbitrage(legs, gross_profit_usd=200.0, min_net_profit_pct=0.5)
    assert analysis.fee_for(Venue.KALSHI) == pytest.approx(35.0)
    assert analysis.fee_for(Venue.POLYMARKET) == pytest.approx(0.15)
    assert analysis.net_profit_usd == pytest.approx(200.0 - 35.15)
    assert analysis.net_profit_pct == pytest.approx((200.0 - 35.15) / 10.0)
    assert analysis.is_profitable


def test_unprofitable_when_fees_exceed_gross() -> None:
    legs = [FeeLeg(venue=Venue.KALSHI, direction="BUY", size_usd=1000.0, price=0.5)]
    analysis = ScheduleFeeService().analyze_arbitrage(legs, gross_profit_usd=10.0, min_net_profit_pct=0.5)
    assert analysis.net_profit_usd < 0
    assert not analysis.is_profitable
