import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from trigram.scoring import coverage_weight, rank


def test_exact_match_is_100():
    assert coverage_weight(5, 5, 5) == 100.0


def test_weight_is_mean_of_both_coverages():
    # query side 2/4, record side 2/5
    assert coverage_weight(2, 4, 5) == pytest.approx((50.0 + 40.0) / 2)


def test_zero_entries_is_excluded():
    assert coverage_weight(1, 4, 0) is None
    assert coverage_weight(1, 0, 4) is None


def test_rank_orders_by_weight_desc():
    rows = [("a", 1, 10), ("b", 3, 4), ("c", 2, 4)]
    ranked = rank(rows, query_size=4, threshold=0)
    assert [rid for rid, _ in ranked] == ["b", "c", "a"]


def test_rank_drops_below_threshold():
    rows = [("a", 1, 100), ("b", 4, 4)]
    # a: (25 + 1) / 2 = 13
    assert [rid for rid, _ in rank(rows, 4, threshold=13)] == ["b", "a"]
    assert [rid for rid, _ in rank(rows, 4, threshold=13.5)] == ["b"]


def test_rank_skips_records_without_entries():
    assert rank([("a", 1, 0)], 3, threshold=0) == []


def test_rank_ties_keep_input_order():
    rows = [(3, 1, 4), (1, 1, 4), (2, 1, 4)]
    assert [rid for rid, _ in rank(rows, 4, threshold=0)] == [3, 1, 2]


def test_lower_threshold_is_superset():
    rows = [(i, i % 4 + 1, 8) for i in range(20)]
    previous = set()
    for threshold in (100, 75, 50, 25, 5, 0):
        current = {rid for rid, _ in rank(rows, 4, threshold)}
        assert previous <= current
        previous = current
