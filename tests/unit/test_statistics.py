"""Unit tests for shared statistics helpers"""

import math
import pytest
from datetime import datetime, timedelta, timezone
from finsignal_gateway.domain.models import Transaction
from finsignal_gateway.domain.statistics import (
    daily_net_flows,
    ensure_finite,
    mean,
    population_std_dev,
    z_score,
)
from finsignal_gateway.domain.exceptions import InvalidInputError


def test_mean_and_population_std_dev():
    values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
    assert mean(values) == 5.0
    assert population_std_dev(values) == 2.0  # population, not sample


def test_mean_empty_raises():
    with pytest.raises(InvalidInputError):
        mean([])


def test_z_score_zero_spread_returns_none():
    """Zero std dev must not produce NaN or infinity"""
    assert z_score(10.0, 5.0, 0.0) is None
    assert z_score(8.0, 5.0, 1.5) == 2.0


def test_daily_net_flows_groups_by_utc_day():
    """Signed amounts are summed per UTC calendar day, ordered by day"""
    day = datetime(2024, 5, 1, 10, 0)
    transactions = [
        Transaction("1", 100.0, day + timedelta(days=1)),
        Transaction("2", -30.0, day),
        Transaction("3", -20.0, day + timedelta(hours=5)),
        # 01:00+02:00 is 23:00 UTC on the previous day
        Transaction("4", 5.0, datetime(2024, 5, 1, 1, 0, tzinfo=timezone(timedelta(hours=2)))),
    ]

    flows = daily_net_flows(transactions)

    assert flows == [5.0, -50.0, 100.0]


def test_population_std_dev_matches_small_population_example():
    # 50, 50, 5000 -> mean 1700, std dev ~2333.5
    assert mean([50, 50, 5000]) == 1700
    assert math.isclose(population_std_dev([50, 50, 5000]), 2333.45, rel_tol=1e-4)


def test_ensure_finite():
    ensure_finite([1.0, -2.5, 0.0])

    with pytest.raises(InvalidInputError, match="daily flows"):
        ensure_finite([1.0, math.nan], "daily flows")
    with pytest.raises(InvalidInputError):
        ensure_finite([math.inf])


def test_mean_rejects_nan():
    with pytest.raises(InvalidInputError):
        mean([1.0, math.nan, 3.0])
