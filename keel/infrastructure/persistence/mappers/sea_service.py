import json
import logging
from datetime import UTC, datetime
from typing import Any

import pydantic

from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.sea_service.model.value import RecordStatus, SeaServicePayload, SyncState

logger = logging.getLogger(__name__)


def parse_payload(blob: Any, record_id: str | None = None) -> SeaServicePayload:
    """Deserialize a stored payload blob.

    A blob that is not valid JSON, not a JSON object, or not the payload shape
    is replaced by the default payload. The user cannot act on a serialization
    problem, so this is logged and never raised.
    """
    if isinstance(blob, (bytes, bytearray)):
        blob = blob.decode("utf-8", errors="replace")
    try:
        data = json.loads(blob) if isinstance(blob, str) else blob
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return SeaServicePayload.model_validate(data)
    except (ValueError, TypeError, RecursionError, pydantic.ValidationError) as e:
        logger.warning(
            "Corrupt Sea Service payload for record %s, using default payload: %s",
            record_id or "<unknown>",
            e,
        )
        return SeaServicePayload.default()


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.fromtimestamp(0, UTC)


def _parse_sync_state(value: Any) -> SyncState:
    try:
        return SyncState(value)
    except ValueError:
        return SyncState.LOCAL_ONLY


def row_to_record(row: dict[str, Any]) -> SeaServiceRecord:
    """Convert database row to SeaServiceRecord aggregate.

    Listing columns are re-derived from the payload, which is authoritative.
    """
    record_id = str(row["id"])
    status = RecordStatus.FINAL if row.get("status") == RecordStatus.FINAL else RecordStatus.DRAFT
    return SeaServiceRecord(
        id=record_id,
        payload=parse_payload(row.get("payload_json"), record_id),
        status=status,
        sync_state=_parse_sync_state(row.get("sync_state")),
        remote_id=row.get("remote_id"),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def record_to_dict(record: SeaServiceRecord) -> dict[str, Any]:
    """Convert SeaServiceRecord aggregate to database dict."""
    return {
        "id": record.id,
        "ship_name": record.ship_name,
        "imo_number": record.imo_number,
        "sign_on_date": record.sign_on_date,
        "sign_off_date": record.sign_off_date,
        "payload_json": record.payload.to_json(),
        "status": str(record.status),
        "last_updated_at": record.payload.last_updated_at,
        "remote_id": record.remote_id,
        "sync_state": str(record.sync_state),
        "created_at": record.created_at.isoformat(),
        "updated_at": record.updated_at.isoformat(),
    }
