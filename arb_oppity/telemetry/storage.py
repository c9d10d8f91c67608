"""Helpers for persisting telemetry artifacts (query events, profile reports)."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from arb_oppity.core.enums import DAY_NAMES, Dimension
from arb_oppity.core.errors import TelemetryError
from arb_oppity.core.time_utils import format_offset, now_utc
from arb_oppity.market.profile import HistoricalProfile
from arb_oppity.telemetry.events import QueryEvent

REPORT_BEST_HOURS = 5
REPORT_BEST_DAYS = 3


def _safe_name(market_id: str) -> str:
    cleaned = "".join(char if char.isalnum() or char in "-_." else "_" for char in market_id)
    return cleaned or "all"


class ReportStorage:
    """Write structured telemetry objects to disk.

    ``ReportStorage`` is instantiated by the CLI and passed to
    :class:`~arb_oppity.service.LiquidityService`. The service appends a
    :class:`QueryEvent` for every answered query; the ``analyze`` command
    writes one JSON report per profiled market.
    """

    def __init__(
        self,
        *,
        logs_dir: Path,
        reports_dir: Path,
    ) -> None:
        self._logs_dir = logs_dir
        self._reports_dir = reports_dir
        try:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            self._reports_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TelemetryError(f"Failed to create telemetry directories: {exc}") from exc

    @property
    def reports_dir(self) -> Path:
        return self._reports_dir

    # ------------------------------------------------------------------
    # JSON event logs
    # ------------------------------------------------------------------
    def append_event(self, event: QueryEvent) -> Path:
        """Append ``event`` as JSON to ``logs/queries_YYYYMMDD.jsonl``."""

        date_str = event.timestamp.strftime("%Y%m%d")
        path = self._logs_dir / f"queries_{date_str}.jsonl"
        try:
            with path.open("a", encoding="utf-8") as handle:
                json.dump(event.to_dict(), handle, ensure_ascii=False)
                handle.write("\n")
        except OSError as exc:  # pragma: no cover - filesystem errors are rare
            raise TelemetryError(f"Failed to write query event: {exc}") from exc
        return path

    # ------------------------------------------------------------------
    # Profile report
    # ------------------------------------------------------------------
    def write_profile_report(self, profile: HistoricalProfile, *, generated_at: datetime | None = None) -> Path:
        """Persist ``profile`` to ``reports/spread_analysis_<market>.json``."""

        path = self._reports_dir / f"spread_analysis_{_safe_name(profile.market_id)}.json"
        try:
            with path.open("w", encoding="utf-8") as handle:
                json.dump(profile_report(profile, generated_at=generated_at), handle, indent=2, ensure_ascii=False)
        except OSError as exc:  # pragma: no cover
            raise TelemetryError(f"Failed to write profile report: {exc}") from exc
        return path


def profile_report(profile: HistoricalProfile, *, generated_at: datetime | None = None) -> Dict[str, Any]:
    """Profile stats plus the widest hours and days as recommendations."""

    best_hours = [
        int(key.index)
        for key in profile.ranked_buckets(Dimension.HOUR)
        if not profile.stats_for(key).is_empty
    ][:REPORT_BEST_HOURS]
    best_days = [
        DAY_NAMES[int(key.index)]
        for key in profile.ranked_buckets(Dimension.DAY_OF_WEEK)
        if not profile.stats_for(key).is_empty
    ][:REPORT_BEST_DAYS]
    return {
        "generated_at": (generated_at or now_utc()).isoformat(),
        "timezone": format_offset(profile.tz_offset_hours),
        "profile": profile.to_dict(),
        "recommendations": {
            "best_hours": best_hours,
            "best_days": best_days,
        },
    }


def default_storage(base_dir: Path) -> ReportStorage:
    """Factory returning storage rooted under ``base_dir``."""

    return ReportStorage(logs_dir=base_dir / "logs", reports_dir=base_dir / "reports")


__all__ = ["ReportStorage", "default_storage", "profile_report"]
