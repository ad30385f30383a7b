"""
Unit tests for the spike rule.
"""

import pytest

from activity_insights.anomaly.detectors import SpikeRule
from activity_insights.core.config import SpikeThresholds


@pytest.fixture
def rule():
    return SpikeRule()


def test_zero_baseline_boundary(rule):
    assert not rule.is_spike(current=4, previous=0)
    assert rule.is_spike(current=5, previous=0)


def test_ratio_boundary_is_inclusive(rule):
    entry = rule.compare("lead_created", current=16, previous=10)
    
    assert entry.delta == 6
    assert entry.ratio == pytest.approx(1.6)
    assert entry.is_spike


def test_ratio_below_threshold(rule):
    entry = rule.compare("lead_created", current=15, previous=10)
    
    assert entry.ratio == pytest.approx(1.5)
    assert not entry.is_spike


def test_high_ratio_needs_minimum_delta(rule):
    # ratio 3.0 but only +2
    assert not rule.is_spike(current=3, previous=1)
    # ratio 4.0 and +3
    assert rule.is_spike(current=4, previous=1)


def test_ratio_is_none_without_baseline(rule):
    entry = rule.compare("campaign_sent", current=7, previous=0)
    
    assert entry.ratio is None
    assert entry.delta == 7
    assert entry.is_spike


def test_drop_is_never_a_spike(rule):
    entry = rule.compare("job_failed", current=0, previous=9)
    
    assert entry.delta == -9
    assert entry.ratio == 0.0
    assert not entry.is_spike


@pytest.mark.parametrize("previous", [0, 1, 2, 5, 10, 37])
def test_spike_rule_is_monotonic_in_current(rule, previous):
    """Raising current with previous fixed never turns a spike off."""
    flags = [rule.is_spike(current, previous) for current in range(0, 120)]
    
    first = flags.index(True)
    assert all(flags[first:])
    assert not any(flags[:first])


def test_rule_from_configured_thresholds():
    rule = SpikeRule.from_thresholds(SpikeThresholds(zero_baseline_min=2, min_ratio=2.0, min_delta=1))
    
    assert rule.is_spike(current=2, previous=0)
    assert rule.is_spike(current=2, previous=1)
    assert not rule.is_spike(current=3, previous=2)
