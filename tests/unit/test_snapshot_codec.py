import json
from datetime import date, datetime

import pytest

from view_manifest.errors import DecodeError
from view_manifest.manifests import decode_snapshot, encode_snapshot
from view_manifest.manifests.snapshot import normalize_date


def test_encode_writes_only_dates():
    doc = json.loads(encode_snapshot(["2020-01-01", "2020-01-02"]).decode("utf-8"))
    assert doc == {"dates": ["2020-01-01", "2020-01-02"]}


def test_decode_reads_dates_list():
    assert decode_snapshot(b'{"dates": ["2020-01-01"], "extra": 1}') == ["2020-01-01"]
    assert decode_snapshot(b'{"dates": []}') == []


@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        b"\xff\xfe",
        b'["2020-01-01"]',
        b'{"days": ["2020-01-01"]}',
        b'{"dates": "2020-01-01"}',
        b'{"dates": ["2020-1-1"]}',
        b'{"dates": [20200101]}',
        b'{"dates": ["2020-01-01\\n"]}',
        '{"dates": ["\uff12\uff10\uff12\uff10-01-01"]}'.encode("utf-8"),
    ],
)
def test_decode_rejects_malformed_documents(payload):
    with pytest.raises(DecodeError):
        decode_snapshot(payload)


def test_normalize_date_accepts_strings_and_date_objects():
    assert normalize_date("2020-03-04") == "2020-03-04"
    assert normalize_date(date(2020, 3, 4)) == "2020-03-04"
    assert normalize_date(datetime(2020, 3, 4, 15, 30)) == "2020-03-04"


@pytest.mark.parametrize(
    "bad",
    [
        "2020-3-4",
        "20200304",
        "2020-03-04T00:00",
        "2020-03-04\n",
        " 2020-03-04",
        "\uff12\uff10\uff12\uff10-03-04",  # full-width digits
        "",
        None,
        20200304,
    ],
)
def test_normalize_date_rejects_malformed(bad):
    with pytest.raises(ValueError):
        normalize_date(bad)
