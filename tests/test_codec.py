"""
Tests for the JSON payload codec.
"""

import pytest

from core import codec


def test_encode_none_is_sql_null():
    assert codec.encode(None) is None


def test_nested_payload_survives_storage_form():
    payload = {"x": 1, "series": ["a", "b"], "axis": {"min": 0, "max": None}}
    assert codec.decode(codec.encode(payload)) == payload


def test_encode_rejects_unserializable_values():
    with pytest.raises(codec.CodecError):
        codec.encode({"when": object()})


def test_decode_rejects_malformed_text():
    with pytest.raises(codec.CodecError):
        codec.decode("{not json")


def test_decode_mapping_requires_object():
    with pytest.raises(codec.CodecError):
        codec.decode_mapping("[1, 2]")


def test_decode_mapping_nullable():
    assert codec.decode_mapping(None, nullable=True) is None
    assert codec.decode_mapping("null", nullable=True) is None
    with pytest.raises(codec.CodecError):
        codec.decode_mapping(None)
