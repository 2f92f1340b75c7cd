"""
Unit tests for the record model, its JSON codec and document decoding.
"""

from decimal import Decimal

import pytest

from cdc_flatten import EnvelopeContractError, Header, Record, Schema, record_from_dict, record_to_dict
from cdc_flatten.documents import decode_document, unwrap_extended_json


class TestRecord:
    """Test record construction."""

    def test_new_record_replaces_selected_attributes(self):
        """Test new_record copies everything it is not told to change."""
        record = Record(topic="t", partition=1, offset=2, key={"id": 1}, value={"a": 1})

        result = record.new_record(value={"b": 2})

        assert result is not record
        assert result.value == {"b": 2}
        assert (result.topic, result.partition, result.offset, result.key) == ("t", 1, 2, {"id": 1})
        assert record.value == {"a": 1}

    def test_header_values(self):
        """Test header lookup by name."""
        record = Record(topic="t", headers=(Header("a", b"1"), Header("b", b"2"), Header("a", b"3")))

        assert record.header_values("a") == [b"1", b"3"]

    def test_schema_has_field(self):
        """Test schema field lookup."""
        schema = Schema(name="x", fields=("op", "after"))

        assert schema.has_field("op")
        assert not schema.has_field("before")


class TestRecordCodec:
    """Test conversion to and from JSON-compatible dicts."""

    def test_from_dict(self):
        """Test a full record dict."""
        record = record_from_dict({
            "topic": "serverX.db.c",
            "partition": 0,
            "offset": 5,
            "key": {"schema": {"name": "serverX.db.c.Key", "fields": ["id"]}, "payload": {"id": "1"}},
            "value": {
                "schema": {"name": "serverX.db.c.Envelope", "fields": ["op", "after"]},
                "payload": {"op": "c", "after": "{}"},
            },
            "headers": [{"name": "h", "value": "v"}],
        })

        assert record.topic == "serverX.db.c"
        assert record.key_schema == Schema(name="serverX.db.c.Key", fields=("id",))
        assert record.value_schema.name == "serverX.db.c.Envelope"
        assert record.value == {"op": "c", "after": "{}"}
        assert record.headers == (Header("h", b"v"),)

    def test_from_dict_tombstone(self):
        """Test a null value gives a tombstone."""
        record = record_from_dict({"topic": "t", "key": {"schema": None, "payload": 1}, "value": None})

        assert record.value is None
        assert record.value_schema is None
        assert record.key == 1

    def test_from_dict_requires_topic(self):
        """Test the topic is mandatory."""
        with pytest.raises(KeyError):
            record_from_dict({"value": None})

    def test_to_dict(self):
        """Test converting back to a dict."""
        record = Record(
            topic="t",
            value_schema=Schema(name="t", fields=("a",)),
            value={"a": 1},
            headers=(Header("__op", b"c"),),
        )

        data = record_to_dict(record)

        assert data == {
            "topic": "t",
            "partition": None,
            "offset": None,
            "key": None,
            "value": {"schema": {"name": "t", "fields": ["a"]}, "payload": {"a": 1}},
            "headers": [{"name": "__op", "value": "c"}],
        }

    def test_to_dict_null_value(self):
        """Test null values are written as null."""
        assert record_to_dict(Record(topic="t", key={"id": 1}))["value"] is None

    def test_to_dict_null_value_keeps_schema(self):
        """Test a tombstone with a schema keeps the schema."""
        record = Record(topic="t", value_schema=Schema(name="t.Value", fields=("a",)))

        assert record_to_dict(record)["value"] == {
            "schema": {"name": "t.Value", "fields": ["a"]},
            "payload": None,
        }

    @pytest.mark.parametrize("payload", ["plain text message", 42, [1, 2]])
    def test_to_dict_non_mapping_payload(self, payload):
        """Test non-mapping payloads are written unchanged."""
        record = Record(topic="t", value_schema=Schema(name="other.Value"), value=payload)

        assert record_to_dict(record)["value"]["payload"] == payload

    def test_tombstone_with_schema_round_trips(self):
        """Test a schema-carrying tombstone survives decoding and encoding."""
        data = {
            "topic": "t",
            "partition": 1,
            "offset": 2,
            "key": None,
            "value": {"schema": {"name": "t.Value", "fields": []}, "payload": None},
            "headers": [],
        }

        assert record_to_dict(record_from_dict(data)) == data


class TestDocuments:
    """Test envelope document decoding."""

    @pytest.mark.parametrize("wrapper,expected", [
        ({"$oid": "5d505646cf6d4fe581014ab2"}, "5d505646cf6d4fe581014ab2"),
        ({"$numberLong": "42"}, 42),
        ({"$numberInt": "7"}, 7),
        ({"$numberDouble": "1.5"}, 1.5),
        ({"$numberDecimal": "9.99"}, Decimal("9.99")),
        ({"$date": 1565787098802}, 1565787098802),
        ({"$date": "2019-08-14T12:51:38.802Z"}, 1565787098802),
        ({"$symbol": "s"}, "s"),
    ])
    def test_unwrap_scalars(self, wrapper, expected):
        """Test extended-JSON scalar wrappers."""
        assert unwrap_extended_json(wrapper) == expected

    def test_unwrap_leaves_documents(self):
        """Test ordinary documents are left alone."""
        assert unwrap_extended_json({"a": 1}) == {"a": 1}
        assert unwrap_extended_json({"$oid": "x", "b": 1}) == {"$oid": "x", "b": 1}

    def test_decode_text(self):
        """Test nested wrappers in text documents."""
        text = '{"_id": {"$oid": "1"}, "at": {"$date": {"$numberLong": "1000"}}}'

        assert decode_document(text, "after") == {"_id": "1", "at": 1000}

    def test_decode_mapping(self):
        """Test wrappers inside mapping documents are unwrapped too."""
        document = {"_id": {"$oid": "1"}, "items": [{"qty": {"$numberInt": "2"}}]}

        assert decode_document(document, "after") == {"_id": "1", "items": [{"qty": 2}]}

    def test_decode_none(self):
        """Test null fields decode to None."""
        assert decode_document(None, "after") is None

    def test_decode_bad_wrapper_value(self):
        """Test an unconvertible wrapper is a contract error."""
        with pytest.raises(EnvelopeContractError):
            decode_document({"n": {"$numberLong": "abc"}}, "after")

    def test_decode_non_document(self):
        """Test JSON that is not an object is a contract error."""
        with pytest.raises(EnvelopeContractError):
            decode_document("42", "before")
