"""SQLAlchemy table definitions for Blackdesk.

These table definitions are used with manual mappers (see ``mappers.py``).
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("username", String(64), nullable=False),
    Column("email", String(255), nullable=True),  # Lowercase, unique when present
    Column("email_verified", TIMESTAMP(timezone=True), nullable=True),
    Column("password_hash", String(255), nullable=True),  # NULL: federation-only
    Column("name", String(255), nullable=True),
    Column("first_name", String(255), nullable=True),
    Column("last_name", String(255), nullable=True),
    Column("image", Text, nullable=True),  # URL or data URL
    Column(
        "username_setup_complete", Boolean, nullable=False, server_default="true"
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("username", name="uq_users_username"),
    UniqueConstraint("email", name="uq_users_email"),
    CheckConstraint("username = lower(username)", name="ck_users_username_lower"),
)

# ============================================================================
# LINKED ACCOUNTS TABLE (federated identities)
# ============================================================================
linked_accounts_table = Table(
    "linked_accounts",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(50), nullable=False),  # 'google'
    Column("provider_account_id", String(255), nullable=False),  # Provider subject
    Column("provider_email", String(255), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint(
        "provider", "provider_account_id", name="uq_linked_accounts_provider_account"
    ),
    UniqueConstraint("user_id", "provider", name="uq_linked_accounts_user_provider"),
)

Index("idx_linked_accounts_user_id", linked_accounts_table.c.user_id)

# ============================================================================
# USER LLM SETTINGS TABLE
# ============================================================================
user_llm_settings_table = Table(
    "user_llm_settings",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(50), nullable=False, server_default="openai"),
    Column("model", String(100), nullable=False, server_default="gpt-4o-mini"),
    # iv:tag:ciphertext, base64
    Column("openai_api_key_enc", Text, nullable=True),
    Column("anthropic_api_key_enc", Text, nullable=True),
    Column("google_api_key_enc", Text, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("user_id", name="uq_user_llm_settings_user_id"),
)
