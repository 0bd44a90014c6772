"""
Tests for content-addressing helpers.
"""
import pytest

from sihiri_sdk.utils import canonical_json, compute_cid, sha256_hex, strip_ipfs_prefix, to_ipfs_uri


def test_sha256_hex():
    assert sha256_hex(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestComputeCid:

    def test_deterministic(self):
        assert compute_cid(b"artwork") == compute_cid(b"artwork")

    def test_distinct_payloads(self):
        assert compute_cid(b"artwork") != compute_cid(b"artwork ")

    def test_multihash_form(self):
        cid = compute_cid(b"artwork")
        assert cid.startswith("Qm")
        assert len(cid) == 46


class TestIpfsUri:

    @pytest.mark.parametrize("value,expected", [
        ("QmAbc", "ipfs://QmAbc"),
        ("ipfs://QmAbc", "ipfs://QmAbc"),
        ("", ""),
    ])
    def test_to_ipfs_uri(self, value, expected):
        assert to_ipfs_uri(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("ipfs://QmAbc", "QmAbc"),
        ("QmAbc", "QmAbc"),
        ("https://ipfs.io/ipfs/QmAbc", "https://ipfs.io/ipfs/QmAbc"),
    ])
    def test_strip_ipfs_prefix(self, value, expected):
        assert strip_ipfs_prefix(value) == expected


class TestCanonicalJson:

    def test_key_order_irrelevant(self):
        assert canonical_json({"b": 1, "a": [1, 2]}) == canonical_json({"a": [1, 2], "b": 1})

    def test_compact_utf8(self):
        assert canonical_json({"name": "Ngoma ya Pwani"}) == b'{"name":"Ngoma ya Pwani"}'
        assert canonical_json({"title": "café"}) == '{"title":"café"}'.encode("utf-8")
