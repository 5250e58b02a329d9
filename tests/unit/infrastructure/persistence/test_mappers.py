import logging
from datetime import UTC, datetime

from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.sea_service.model.value import (
    RecordStatus,
    SeaServicePayload,
    SectionKey,
    SyncState,
)
from keel.infrastructure.persistence.mappers.sea_service import (
    parse_payload,
    record_to_dict,
    row_to_record,
)

_NOW = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)


class TestSeaServiceMappers:
    def test_record_mapping(self):
        record = SeaServiceRecord.new_draft(_NOW)
        record.apply_section(SectionKey.GENERAL_IDENTITY, {"shipName": "MV Aurora"}, _NOW)

        data = record_to_dict(record)
        assert data["id"] == record.id
        assert data["status"] == "DRAFT"
        assert data["sync_state"] == "DIRTY"
        assert data["ship_name"] == "MV Aurora"
        assert data["created_at"] == "2025-01-01T08:00:00+00:00"

        reconstructed = row_to_record(data)
        assert reconstructed.id == record.id
        assert reconstructed.payload == record.payload
        assert reconstructed.created_at == record.created_at

    def test_payload_is_authoritative_for_listing_columns(self):
        record = SeaServiceRecord.new_draft(_NOW)
        record.apply_section(SectionKey.GENERAL_IDENTITY, {"shipName": "MV Aurora"}, _NOW)
        data = {**record_to_dict(record), "ship_name": "stale"}

        assert row_to_record(data).ship_name == "MV Aurora"

    def test_unknown_status_reads_as_draft(self):
        data = record_to_dict(SeaServiceRecord.new_draft(_NOW))
        assert row_to_record({**data, "status": "ARCHIVED"}).status == RecordStatus.DRAFT
        assert row_to_record({**data, "status": "FINAL"}).status == RecordStatus.FINAL

    def test_sync_state_placeholder(self):
        data = record_to_dict(SeaServiceRecord.new_draft(_NOW))
        assert row_to_record({**data, "sync_state": None}).sync_state == SyncState.LOCAL_ONLY


class TestParsePayload:
    def test_accepts_text_bytes_and_mappings(self):
        expected = SeaServicePayload.default().with_ship_type("RO_RO", stamp=1)
        blob = expected.to_json()

        assert parse_payload(blob) == expected
        assert parse_payload(blob.encode("utf-8")) == expected
        assert parse_payload(expected.to_dict()) == expected

    def test_corrupt_blob_is_logged_not_raised(self, caplog):
        with caplog.at_level(logging.WARNING):
            payload = parse_payload("{broken", record_id="ss_1_abcdef")

        assert payload == SeaServicePayload.default()
        assert "ss_1_abcdef" in caplog.text

    def test_none_blob(self):
        assert parse_payload(None) == SeaServicePayload.default()

    def test_deeply_nested_blob(self):
        blob = '{"sections": ' + "[" * 200000 + "]" * 200000 + "}"
        assert parse_payload(blob) == SeaServicePayload.default()
