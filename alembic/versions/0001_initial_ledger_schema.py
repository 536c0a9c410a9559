"""Initial schema for the token registry, marketplace, royalties, journal and event outbox."""

from __future__ import annotations
from typing import Union, Sequence

from alembic import op
import sqlalchemy as sa
from nft_ledger.models.types import GUID, JSONType

# revision identifiers, used by Alembic.
revision: str = "0001_initial_ledger_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PRINCIPAL = 150


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def upgrade() -> None:
    """Initial ledger schema."""
    listing_close_reason = sa.Enum("bought", "unlisted", name="listing_close_reason", native_enum=False)
    offer_close_reason = sa.Enum("accepted", "cancelled", "rejected", name="offer_close_reason", native_enum=False)
    delivery_state = sa.Enum(
        "pending",
        "succeeded",
        "failed",
        name="platform_event_delivery_state",
        native_enum=False,
    )

    op.create_table(
        "collections",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("contract_id", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("owner", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("minting_enabled", sa.Boolean(), nullable=False),
        sa.Column("last_token_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_collections")),
        sa.UniqueConstraint("contract_id", name="uq_collections_contract_id"),
    )
    op.create_table(
        "tokens",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("collection_id", GUID(), nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=False),
        sa.Column("owner", sa.String(length=PRINCIPAL), nullable=True),
        sa.Column("creator", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("content_uri", sa.String(length=256), nullable=False),
        sa.Column("royalty_bps", sa.Integer(), nullable=False),
        sa.Column("approved_spender", sa.String(length=PRINCIPAL), nullable=True),
        sa.Column("burned", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["collection_id"],
            ["collections.id"],
            name=op.f("fk_tokens_collection_id_collections"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tokens")),
        sa.UniqueConstraint("collection_id", "token_id", name="uq_tokens_collection_token"),
    )
    op.create_index("ix_tokens_owner", "tokens", ["owner"], unique=False)

    op.create_table(
        "listings",
        sa.Column("listing_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("token_contract", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=False),
        sa.Column("seller", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("price", sa.BigInteger(), nullable=False),
        sa.Column("expiry", sa.BigInteger(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at_block", sa.BigInteger(), nullable=False),
        sa.Column("closed_reason", listing_close_reason, nullable=True),
        sa.Column("buyer", sa.String(length=PRINCIPAL), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("listing_id", name=op.f("pk_listings")),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_listings_token", "listings", ["token_contract", "token_id"], unique=False)
    op.create_index("ix_listings_active", "listings", ["active"], unique=False)

    op.create_table(
        "offers",
        sa.Column("offer_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("token_contract", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=False),
        sa.Column("buyer", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("expiry", sa.BigInteger(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at_block", sa.BigInteger(), nullable=False),
        sa.Column("closed_reason", offer_close_reason, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("offer_id", name=op.f("pk_offers")),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_offers_token", "offers", ["token_contract", "token_id"], unique=False)

    op.create_table(
        "sales",
        sa.Column("sale_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=True),
        sa.Column("offer_id", sa.Integer(), nullable=True),
        sa.Column("token_contract", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=False),
        sa.Column("seller", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("buyer", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("price", sa.BigInteger(), nullable=False),
        sa.Column("platform_fee", sa.BigInteger(), nullable=False),
        sa.Column("fee_recipient", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("royalty", sa.BigInteger(), nullable=False),
        sa.Column("royalty_recipient", sa.String(length=PRINCIPAL), nullable=True),
        sa.Column("seller_amount", sa.BigInteger(), nullable=False),
        sa.Column("block_height", sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("sale_id", name=op.f("pk_sales")),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_sales_token", "sales", ["token_contract", "token_id"], unique=False)

    op.create_table(
        "marketplace_state",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("operator", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("block_height", sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_marketplace_state")),
    )

    op.create_table(
        "royalty_records",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("token_contract", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=True),
        sa.Column("recipient", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("rate_bps", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_royalty_records")),
    )
    op.create_index("ix_royalty_records_token", "royalty_records", ["token_contract", "token_id"], unique=False)

    op.create_table(
        "creator_earnings",
        sa.Column("principal", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("total", sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("principal", name=op.f("pk_creator_earnings")),
    )

    op.create_table(
        "platform_fee_config",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("fee_bps", sa.Integer(), nullable=False),
        sa.Column("recipient", sa.String(length=PRINCIPAL), nullable=False),
        sa.Column("royalty_enabled", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_platform_fee_config")),
    )

    op.create_table(
        "journal_entries",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("sequence", sa.BigInteger(), nullable=False),
        sa.Column("previous_hash", sa.String(length=128), nullable=False),
        sa.Column("entry_hash", sa.String(length=128), nullable=False),
        sa.Column("hash_version", sa.Integer(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("block_height", sa.BigInteger(), nullable=False),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("actor", sa.String(length=PRINCIPAL), nullable=True),
        sa.Column("subject_type", sa.String(length=64), nullable=True),
        sa.Column("subject_id", sa.String(length=PRINCIPAL + 24), nullable=True),
        sa.Column("details", JSONType(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_journal_entries")),
    )
    op.create_index("ix_journal_entries_actor", "journal_entries", ["actor"], unique=False)
    op.create_index("ix_journal_entries_subject", "journal_entries", ["subject_type", "subject_id"], unique=False)
    op.create_index("ix_journal_entries_action", "journal_entries", ["action"], unique=False)
    op.create_index("ix_journal_entries_sequence", "journal_entries", ["sequence"], unique=True)

    op.create_table(
        "platform_events",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("event_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("source", sa.String(length=128), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("block_height", sa.BigInteger(), nullable=False),
        sa.Column("schema_version", sa.String(length=16), nullable=False),
        sa.Column("payload", JSONType(), nullable=False),
        sa.Column("delivery_state", delivery_state, nullable=False),
        sa.Column("delivery_attempts", sa.Integer(), nullable=False),
        sa.Column("last_error", sa.String(length=1024), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_platform_events")),
        sa.UniqueConstraint("event_id", name=op.f("uq_platform_events_event_id")),
    )
    op.create_index("ix_platform_events_event_type", "platform_events", ["event_type"], unique=False)
    op.create_index("ix_platform_events_occurred_at", "platform_events", ["occurred_at"], unique=False)


def downgrade() -> None:
    """Drop the ledger schema."""
    op.drop_index("ix_platform_events_occurred_at", table_name="platform_events")
    op.drop_index("ix_platform_events_event_type", table_name="platform_events")
    op.drop_table("platform_events")
    op.drop_index("ix_journal_entries_sequence", table_name="journal_entries")
    op.drop_index("ix_journal_entries_action", table_name="journal_entries")
    op.drop_index("ix_journal_entries_subject", table_name="journal_entries")
    op.drop_index("ix_journal_entries_actor", table_name="journal_entries")
    op.drop_table("journal_entries")
    op.drop_table("platform_fee_config")
    op.drop_table("creator_earnings")
    op.drop_index("ix_royalty_records_token", table_name="royalty_records")
    op.drop_table("royalty_records")
    op.drop_table("marketplace_state")
    op.drop_index("ix_sales_token", table_name="sales")
    op.drop_table("sales")
    op.drop_index("ix_offers_token", table_name="offers")
    op.drop_table("offers")
    op.drop_index("ix_listings_active", table_name="listings")
    op.drop_index("ix_listings_token", table_name="listings")
    op.drop_table("listings")
    op.drop_index("ix_tokens_owner", table_name="tokens")
    op.drop_table("tokens")
    op.drop_table("collections")
