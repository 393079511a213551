from itertools import permutations

from view_manifest.manifests import DateSet


def test_merge_sorts_dedupes_and_reports_change():
    ds = DateSet()
    assert ds.merge(["2020-01-03", "2020-01-01", "2020-01-03"]) is True
    assert ds.to_list() == ["2020-01-01", "2020-01-03"]


def test_merge_is_idempotent():
    ds = DateSet()
    dates = ["2020-02-01", "2020-01-15", "2020-01-15"]
    assert ds.merge(dates) is True
    before = ds.to_list()
    assert ds.merge(dates) is False
    assert ds.to_list() == before


def test_merge_subset_is_not_a_change():
    ds = DateSet(["2020-01-01", "2020-01-02"])
    assert ds.merge(["2020-01-02"]) is False
    assert ds.merge([]) is False


def test_merge_order_does_not_matter():
    batches = [["2020-01-02", "2020-01-01"], ["2020-01-03"], ["2020-01-01"]]
    results = set()
    for order in permutations(batches):
        ds = DateSet()
        for batch in order:
            ds.merge(batch)
        results.add(tuple(ds.to_list()))
    assert results == {("2020-01-01", "2020-01-02", "2020-01-03")}


def test_range_before_returns_preceding_dates():
    ds = DateSet(["2020-01-01", "2020-01-05", "2020-01-10"])
    assert ds.range_before("2020-01-10", 2) == ["2020-01-01", "2020-01-05"]
    assert ds.range_before("2020-01-10", 1) == ["2020-01-05"]
    assert ds.range_before("2020-01-01", 5) == []


def test_range_before_clamps_and_handles_absent_dates():
    ds = DateSet(["2020-01-01", "2020-01-05", "2020-01-10"])
    # Not in the set: insertion point is between 01-05 and 01-10
    assert ds.range_before("2020-01-07", 10) == ["2020-01-01", "2020-01-05"]
    assert ds.range_before("2021-01-01", 2) == ["2020-01-05", "2020-01-10"]
    assert ds.range_before("2021-01-01", 0) == []
    assert DateSet().range_before("2020-01-01", 3) == []


def test_insert_sorted_keeps_order_and_rejects_duplicates():
    ds = DateSet(["2020-01-01", "2020-01-10"])
    assert ds.insert_sorted("2020-01-05") is True
    assert ds.insert_sorted("2020-01-05") is False
    assert ds.insert_sorted("2019-12-31") is True
    assert ds.insert_sorted("2020-02-01") is True
    assert ds.to_list() == ["2019-12-31", "2020-01-01", "2020-01-05", "2020-01-10", "2020-02-01"]
    assert "2020-01-05" in ds
    assert "2020-01-06" not in ds
    assert len(ds) == 5


def test_to_list_is_a_copy():
    ds = DateSet(["2020-01-01"])
    out = ds.to_list()
    out.append("2020-01-02")
    assert ds.to_list() == ["2020-01-01"]
