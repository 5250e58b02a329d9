"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    BigInteger,
    Column,
    Index,
    MetaData,
    String,
    Table,
    Text,
    text,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# SEA SERVICE RECORDS TABLE
# ============================================================================
sea_service_records_table = Table(
    "sea_service_records",
    metadata,
    Column("id", String, primary_key=True),
    Column("ship_name", String, nullable=True),  # Derived from payload, listing only
    Column("imo_number", String, nullable=True),  # Derived from payload, listing only
    Column("sign_on_date", String, nullable=True),  # ISO YYYY-MM-DD
    Column("sign_off_date", String, nullable=True),  # ISO YYYY-MM-DD
    Column("payload_json", Text, nullable=False, server_default=text("'{}'")),
    Column("status", String(16), nullable=False, server_default=text("'DRAFT'")),
    Column("last_updated_at", BigInteger, nullable=True),  # epoch ms
    Column("remote_id", String, nullable=True),  # Assigned by future sync
    Column("sync_state", String(16), nullable=False, server_default=text("'LOCAL_ONLY'")),
    Column("created_at", String(40), nullable=False, server_default=text("''")),  # ISO 8601
    Column("updated_at", String(40), nullable=False, server_default=text("''")),  # ISO 8601
)

# At most one DRAFT row
Index(
    "uq_sea_service_single_draft",
    sea_service_records_table.c.status,
    unique=True,
    sqlite_where=text("status = 'DRAFT'"),
    postgresql_where=text("status = 'DRAFT'"),
)

Index(
    "idx_sea_service_status_updated",
    sea_service_records_table.c.status,
    sea_service_records_table.c.updated_at,
)
