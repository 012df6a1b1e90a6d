"""Tests for the pure performance calculator and P&L history."""

import math
import random
from datetime import datetime, timezone

import pytest

from analytics.performance import (
    build_pnl_history,
    calculate_performance,
    filter_pnl_history,
    range_start,
)
from models.positions import PnLDataPoint, Side, TimeRange
from services.errors import ComputeError
from tests.conftest import closed_position, open_position

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
NOW_TS = int(NOW.timestamp())
DAY = 86400


class TestCalculatePerformance:

    def test_closed_winner_and_loser(self):
        """Entry 100 -> exit 150 and entry 200 -> exit 180, nothing open."""
        closed = [
            closed_position(100, 150, size=1),
            closed_position(200, 180, size=1),
        ]

        summary = calculate_performance(closed, [], NOW)

        assert summary.realized_pnl == 30
        assert summary.unrealized_pnl == 0
        assert summary.wins == 1
        assert summary.losses == 1
        assert summary.win_rate == 0.5
        assert summary.closed_count == 2
        assert summary.open_count == 0

    def test_empty_wallet_is_all_zero(self):
        summary = calculate_performance([], [], NOW)

        assert summary.realized_pnl == 0
        assert summary.unrealized_pnl == 0
        assert summary.total_pnl == 0
        assert summary.total_volume == 0
        assert summary.win_rate == 0
        assert summary.roi == 0
        assert summary.wins == summary.losses == 0
        assert set(summary.period_pnl.values()) == {0.0}

    def test_break_even_is_neither_win_nor_loss(self):
        closed = [closed_position(0.5, 0.5), closed_position(0.4, 0.6)]

        summary = calculate_performance(closed, [], NOW)

        assert summary.wins == 1
        assert summary.losses == 0
        assert summary.win_rate == 1.0

    def test_only_ties_gives_zero_win_rate(self):
        summary = calculate_performance([closed_position(0.5, 0.5)], [], NOW)
        assert summary.win_rate == 0.0

    def test_open_positions_are_unrealized(self):
        opened = [open_position(10, 12, size=5), open_position(20, 15, size=2)]

        summary = calculate_performance([], opened, NOW)

        assert summary.unrealized_pnl == 0
        assert summary.realized_pnl == 0
        assert summary.open_count == 2
        assert summary.win_rate == 0

    def test_roi_over_both_sets(self):
        closed = [closed_position(100, 150, size=1)]
        opened = [open_position(100, 90, size=1)]

        summary = calculate_performance(closed, opened, NOW)

        assert summary.total_volume == 200
        assert summary.total_pnl == 40
        assert summary.roi == pytest.approx(0.2)

    def test_short_side_sign(self):
        summary = calculate_performance([closed_position(100, 80, size=1, side=Side.SHORT)], [], NOW)

        assert summary.realized_pnl == 20
        assert summary.wins == 1

    def test_non_finite_input_raises(self):
        with pytest.raises(ComputeError):
            calculate_performance([closed_position(1.0, math.inf)], [], NOW)

    def test_randomized_inputs_stay_bounded(self):
        rng = random.Random(1234)
        for _ in range(200):
            closed = [
                closed_position(rng.uniform(0, 1), rng.uniform(0, 1), size=rng.uniform(0, 1000))
                for _ in range(rng.randint(0, 20))
            ]
            opened = [
                open_position(rng.uniform(0, 1), rng.uniform(0, 1), size=rng.uniform(0, 1000))
                for _ in range(rng.randint(0, 20))
            ]

            summary = calculate_performance(closed, opened, NOW)

            assert 0.0 <= summary.win_rate <= 1.0
            assert math.isfinite(summary.roi)
            assert summary.total_pnl == pytest.approx(summary.realized_pnl + summary.unrealized_pnl)

    def test_same_input_same_output(self):
        closed = [closed_position(0.2, 0.9, closed_at=NOW_TS - DAY)]
        opened = [open_position(0.5, 0.4)]

        assert calculate_performance(closed, opened, NOW) == calculate_performance(closed, opened, NOW)


class TestPeriodPnl:

    def test_windows_include_unrealized(self):
        closed = [
            closed_position(100, 110, size=1, closed_at=NOW_TS - 3600),  # +10, today
            closed_position(100, 120, size=1, closed_at=NOW_TS - 3 * DAY),  # +20, this week
            closed_position(100, 140, size=1, closed_at=NOW_TS - 100 * DAY),  # +40, this year
            closed_position(100, 180, size=1, closed_at=NOW_TS - 400 * DAY),  # +80, older
        ]
        opened = [open_position(100, 101, size=1)]  # +1

        period = calculate_performance(closed, opened, NOW).period_pnl

        assert period["1D"] == 11
        assert period["1W"] == 31
        assert period["1M"] == 31
        assert period["YTD"] == 71
        assert period["1Y"] == 71
        assert period["MAX"] == 151

    def test_range_start_boundaries(self):
        assert range_start(TimeRange.MAX, NOW) is None
        assert range_start(TimeRange.ONE_DAY, NOW) == NOW_TS - DAY
        assert range_start(TimeRange.YEAR_TO_DATE, NOW) == int(
            datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp()
        )


class TestPnlHistory:

    def test_daily_cumulative_with_live_point(self):
        day1 = NOW_TS - 10 * DAY
        day2 = NOW_TS - 5 * DAY
        closed = [
            closed_position(100, 110, size=1, closed_at=day1),
            closed_position(100, 105, size=1, closed_at=day1 + 60),
            closed_position(100, 90, size=1, closed_at=day2),
        ]
        opened = [open_position(100, 103, size=1)]

        points = build_pnl_history(closed, opened, NOW)

        assert [p.pnl for p in points] == [15, 5, 8]
        assert points[0].timestamp % DAY == 0
        assert points[-1].timestamp == NOW_TS

    def test_no_live_point_when_last_matches(self):
        closed = [closed_position(100, 110, size=1, closed_at=NOW_TS - DAY)]

        points = build_pnl_history(closed, [], NOW)

        assert len(points) == 1
        assert points[0].pnl == 10

    def test_empty_wallet_gets_single_zero_point(self):
        points = build_pnl_history([], [], NOW)

        assert points == [PnLDataPoint(date="2024-06-15", timestamp=NOW_TS, pnl=0.0)]

    def test_filter_prefixes_start_point(self):
        points = [
            PnLDataPoint(date="a", timestamp=NOW_TS - 20 * DAY, pnl=5.0),
            PnLDataPoint(date="b", timestamp=NOW_TS - 3 * DAY, pnl=12.0),
            PnLDataPoint(date="c", timestamp=NOW_TS, pnl=15.0),
        ]

        week = filter_pnl_history(points, TimeRange.ONE_WEEK, NOW)

        assert week[0].timestamp == NOW_TS - 7 * DAY
        assert week[0].pnl == 5.0
        assert [p.pnl for p in week[1:]] == [12.0, 15.0]

    def test_filter_max_is_unchanged(self):
        points = [PnLDataPoint(date="a", timestamp=1, pnl=1.0)]
        assert filter_pnl_history(points, TimeRange.MAX, NOW) is points

    def test_filter_with_nothing_in_range_returns_all(self):
        points = [PnLDataPoint(date="a", timestamp=NOW_TS - 30 * DAY, pnl=1.0)]
        assert filter_pnl_history(points, TimeRange.ONE_DAY, NOW) == points
