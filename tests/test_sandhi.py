from datetime import datetime, timedelta, timezone

import pytest

from jyotish_dasha.astro.dasha import Period, resolve
from jyotish_dasha.astro.nakshatra import locate
from jyotish_dasha.astro.sandhi import sandhi_window, scan, upcoming_transitions
from jyotish_dasha.astro.systems import VIMSHOTTARI, root_periods

BIRTH = datetime(2000, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def roots():
    return root_periods(VIMSHOTTARI, BIRTH, locate(0.0))


def test_nested_periods_sharing_an_end_are_all_flagged(roots):
    at = roots[1].end - timedelta(days=1)
    chain = resolve(roots, at, 3)

    flags = scan(chain, timedelta(days=2))
    assert [f.level for f in flags] == [1, 2, 3]
    for flag in flags:
        assert flag.time_until_boundary == timedelta(days=1)
        assert flag.boundary == roots[1].end

    data = flags[0].to_dict()
    assert data["lord"] == "Venus"
    assert data["daysUntilBoundary"] == pytest.approx(1.0)


def test_zero_lookahead_flags_nothing_mid_period(roots):
    chain = resolve(roots, roots[1].end - timedelta(days=1), 3)
    assert scan(chain, timedelta(0)) == []


def test_negative_lookahead_is_rejected(roots):
    chain = resolve(roots, BIRTH, 1)
    with pytest.raises(ValueError):
        scan(chain, timedelta(days=-1))


def test_mahadasha_transition_with_clamped_window(roots):
    transitions = upcoming_transitions(roots, BIRTH, timedelta(days=7 * 365.25 + 10), levels=1)

    assert len(transitions) == 1
    t = transitions[0]
    assert (t.from_element, t.to_element) == ("Ketu", "Venus")
    assert t.instant == roots[0].end
    # 5% of seven years is far above the 30 day cap
    assert t.window_start == t.instant - timedelta(days=15)
    assert t.window_end == t.instant + timedelta(days=15)
    assert t.contains(t.instant)
    assert not t.contains(t.instant + timedelta(days=16))
    assert t.to_dict()["toLord"] == "Venus"


def test_transitions_are_ordered_and_inside_window(roots):
    start = BIRTH + timedelta(days=1000)
    lookahead = timedelta(days=3 * 365)
    transitions = upcoming_transitions(roots, start, lookahead, levels=2)

    assert transitions
    instants = [(t.instant, t.level) for t in transitions]
    assert instants == sorted(instants)
    for t in transitions:
        assert start < t.instant <= start + lookahead
        assert t.level in (1, 2)


def test_transition_levels_are_bounded(roots):
    with pytest.raises(ValueError):
        upcoming_transitions(roots, BIRTH, timedelta(days=10), levels=4)
    with pytest.raises(ValueError):
        upcoming_transitions(roots, BIRTH, timedelta(days=-10))


def test_tiny_period_gets_minimum_window():
    period = Period("Moon", 3, BIRTH, BIRTH + timedelta(hours=1), 0, 10)
    assert sandhi_window(period) == timedelta(days=1)


def _level_one(days_each):
    ketu_end = BIRTH + timedelta(days=days_each)
    return [
        Period("Ketu", 1, BIRTH, ketu_end, 0, 7),
        Period("Venus", 1, ketu_end, ketu_end + timedelta(days=days_each), 1, 20),
    ]


def test_one_day_window_collapses_onto_boundary():
    roots = _level_one(10)
    (t,) = upcoming_transitions(roots, BIRTH, timedelta(days=15), levels=1)
    assert t.window_start == t.window_end == t.instant
    assert t.contains(t.instant)


def test_odd_window_is_split_in_whole_days():
    # 5% of 100 days gives a five day window, two whole days either side
    roots = _level_one(100)
    (t,) = upcoming_transitions(roots, BIRTH, timedelta(days=150), levels=1)
    assert t.window_start == t.instant - timedelta(days=2)
    assert t.window_end == t.instant + timedelta(days=2)


def test_far_future_start_does_not_overflow(roots):
    start = datetime(9999, 1, 1, tzinfo=timezone.utc)
    assert upcoming_transitions(roots, start, timedelta(days=120 * 365.25)) == []


def test_empty_roots_are_rejected():
    with pytest.raises(ValueError):
        upcoming_transitions([], BIRTH, timedelta(days=1))
