import os
import uuid

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("S3_ENDPOINT"),
    reason="Requires S3/MinIO endpoint in environment",
)


def test_s3_manifest_rebuild_add_and_reload():
    from view_manifest.manifests import Manifest
    from view_manifest.storage.s3_client import get_s3_client

    s3 = get_s3_client()
    prefix = f"it-{uuid.uuid4().hex}/"
    seeded = [f"{prefix}views/2020-01-01.json", f"{prefix}views/2020-01-03.json"]
    for key in seeded:
        s3.put_object(key, b"{}", content_type="application/json")

    try:
        m1 = Manifest(store=s3, prefix=prefix, grace_delay=0.2)
        assert m1.get_dates_before("2021-01-01", 10) == ["2020-01-01", "2020-01-03"]
        assert m1.add_date("2020-01-02") is True

        m2 = Manifest(store=s3, prefix=prefix, grace_delay=5)
        m2.load()
        assert m2.dates == ["2020-01-01", "2020-01-02", "2020-01-03"]
    finally:
        for key in seeded + [f"{prefix}manifest.json"]:
            s3.delete_object(key)
